class FeatureGateError(Exception):
    pass

class InvalidFeature(FeatureGateError):
    def __init__(self, feature):
        self.feature = str(feature)
        super().__init__(f"Invalid feature: {self.feature}")

class StoreError(FeatureGateError):
    """Raised when the backing store fails; never means "inactive"."""
