from loguru import logger

from shotscript.exceptions import ValidationError


class DurationValidator:
    """Rejects clips too short to script and flags ones likely to run slowly."""

    def __init__(self, min_duration: float = 5.0, max_duration: float = 300.0):
        self.min_duration = min_duration
        self.max_duration = max_duration

    def validate(self, duration: float) -> bool:
        """
        Returns True when the duration is within bounds, False when it is over
        the maximum (a warning is logged and the run continues).

        Raises:
            ValidationError: duration is below the minimum.
        """
        if duration < self.min_duration:
            raise ValidationError(
                f"Video is too short ({duration:.1f}s); at least {self.min_duration:.0f}s is required",
                error_code="duration_too_short",
                details={"duration": duration, "min_duration": self.min_duration},
            )
        if duration > self.max_duration:
            logger.warning(
                f"Video is {duration:.1f}s, longer than the recommended {self.max_duration:.0f}s; "
                "analysis may be slow and coarse"
            )
            return False
        return True
