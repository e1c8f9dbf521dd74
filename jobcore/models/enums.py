import enum


class JobType(str, enum.Enum):
    """Job types known out of the box.

    The set is open: any tag with a registered handler is a valid job type.
    """

    EMAIL = "EMAIL"
    IMAGE_RESIZE = "IMAGE_RESIZE"
    FILE_PROCESSING = "FILE_PROCESSING"
    GENERIC_BATCH = "GENERIC_BATCH"


class Priority(enum.IntEnum):
    """Job priority. Higher value is claimed first."""

    LOW = 0
    NORMAL = 1
    HIGH = 2
    URGENT = 3

    # The file processing queue used to call the middle level MEDIUM
    MEDIUM = 1

    @classmethod
    def parse(cls, value: "Priority | str | int") -> "Priority":
        if isinstance(value, Priority):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid priority: {value!r}")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Invalid priority: {value!r}") from None
        raise ValueError(f"Invalid priority: {value!r}")
