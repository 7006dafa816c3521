"""Custom exception hierarchy for prop-stake."""


class StakingError(Exception):
    """Base exception for all prop-stake errors."""


class UnauthorizedError(StakingError):
    """Raised when the caller lacks administrator rights."""


class EntityNotFoundError(StakingError):
    """Raised when a referenced entity does not exist."""


class PropertyNotFoundError(EntityNotFoundError):
    """Raised when a property id has never been allocated."""


class NoStakeError(EntityNotFoundError):
    """Raised when the caller holds no stake in the property."""


class InvalidParameterError(StakingError):
    """Raised when an input parameter is out of bounds."""


class InvalidAmountError(InvalidParameterError):
    """Raised for zero or otherwise malformed quantities."""


class InvalidRateError(InvalidParameterError):
    """Raised when a reward rate exceeds 10000 basis points."""


class InvalidDurationError(InvalidParameterError):
    """Raised when a staking period is not positive."""


class InvalidEntityStateError(StakingError):
    """Raised when an entity is in an invalid state for the operation."""


class InsufficientBalanceError(InvalidEntityStateError):
    """Raised when a withdrawal exceeds the staked amount."""


class PeriodNotElapsedError(InvalidEntityStateError):
    """Raised when a lock or claim window is still open."""


class ExceedsLimitError(InvalidEntityStateError):
    """Raised when a withdrawal is above the per-cycle cap."""


class NotSuccessfulError(InvalidEntityStateError):
    """Raised when claiming on a property not flagged successful."""


class NoRewardError(InvalidEntityStateError):
    """Raised when a claim would pay nothing."""


class NoPeriodsElapsedError(NoRewardError):
    """Raised when no full period has accrued since the last checkpoint."""


class InsufficientPoolError(InvalidEntityStateError):
    """Raised when the reward pool cannot cover a claim."""


class TransferError(StakingError):
    """Raised when an asset transfer cannot be carried out."""


class ReentrancyError(StakingError):
    """Raised when an operation is entered while another one is outstanding."""


class ConfigurationError(StakingError):
    """Raised when configuration is invalid or missing."""


class SinkError(StakingError):
    """Raised when a sink operation fails."""
