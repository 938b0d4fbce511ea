from .acquisition import AcquisitionResult, AcquisitionState, ResponseAcquirer

__all__ = ["AcquisitionResult", "AcquisitionState", "ResponseAcquirer"]
