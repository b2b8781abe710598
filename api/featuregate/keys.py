NAMESPACE = "feature"
SEPARATOR = ":"
KEY_PATTERN = f"{NAMESPACE}{SEPARATOR}*"

def base_key(name) -> str:
    return f"{NAMESPACE}{SEPARATOR}{name}"

def group_key(name) -> str:
    return f"{base_key(name)}{SEPARATOR}groups"

def user_key(name) -> str:
    return f"{base_key(name)}{SEPARATOR}users"

def percentage_key(name) -> str:
    return f"{base_key(name)}{SEPARATOR}percentage"

def feature_keys(name) -> tuple:
    return group_key(name), user_key(name), percentage_key(name)

def feature_name(key: str) -> str:
    # feature:<name>[:suffix]
    return key.split(SEPARATOR)[1]

def is_valid_name(name) -> bool:
    name = str(name)
    return bool(name) and SEPARATOR not in name
