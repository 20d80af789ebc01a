from .normalizer import INTAKE_RULES, FailurePolicy, GeoPoint, normalize_intake

__all__ = ["INTAKE_RULES", "FailurePolicy", "GeoPoint", "normalize_intake"]
