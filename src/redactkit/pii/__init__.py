"""PII detection package.

Auto-registers built-in detectors on import so they're available to every pipeline.
"""

def _auto_register_detectors():
    """Register built-in PII detectors automatically."""
    from .registry import register_detector, list_detectors
    from .detectors.aadhaar import AadhaarDetector
    from .detectors.ssn import SSNDetector
    from .detectors.pan import PANDetector
    from .detectors.passport import PassportDetector
    from .detectors.ifsc import IFSCDetector
    from .detectors.card import CardDetector
    from .detectors.phone import PhoneDetector
    from .detectors.email import EmailDetector
    from .detectors.date import DateDetector
    from .detectors.contextual import ContextualDetector

    registered = list_detectors()
    for det in (
        AadhaarDetector(),
        SSNDetector(),
        PANDetector(),
        PassportDetector(),
        IFSCDetector(),
        CardDetector(),
        PhoneDetector(),
        EmailDetector(),
        DateDetector(),
        ContextualDetector(),
    ):
        if det.name not in registered:
            register_detector(det)

# Auto-register on import
_auto_register_detectors()
