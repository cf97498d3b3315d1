"""Resource limiters for searches (result counts and file sizes)."""

from typing import Optional


class ResultLimiter:
    """Limits how many items an aggregate accepts."""

    def __init__(self, max_items: Optional[int]) -> None:
        """Initialize result limiter.

        Args:
            max_items: Maximum number of items accepted, or None for no limit
        """
        self.max_items = max_items
        self.count = 0

    @property
    def reached(self) -> bool:
        """True once no further items will be accepted."""
        return self.max_items is not None and self.count >= self.max_items

    def reset(self) -> None:
        """Reset the item counter."""
        self.count = 0

    def accept(self) -> bool:
        """Count one more item if the limit allows it.

        Returns:
            True if the item was accepted, False if the limit is already reached
        """
        if self.reached:
            return False
        self.count += 1
        return True


class FileSizeLimiter:
    """Rejects files larger than a byte budget."""

    def __init__(self, max_bytes: int) -> None:
        """Initialize file size limiter.

        Args:
            max_bytes: Largest file size, in bytes, that is still read
        """
        self.max_bytes = max_bytes

    def allows(self, size: int) -> bool:
        return size <= self.max_bytes
