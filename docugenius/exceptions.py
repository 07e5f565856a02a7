"""Custom exceptions for DocuGenius."""

from typing import Optional


class DocuGeniusError(Exception):
    """Base exception for DocuGenius errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class MalformedPackage(DocuGeniusError):
    """Raised when an imported package lacks a parsable main document part."""

    pass


class UnsupportedEmbed(DocuGeniusError):
    """Raised when an embedded image data URI cannot be decoded."""

    pass


class OverflowUnresolvable(DocuGeniusError):
    """Raised when a single atomic node is taller than its page box."""

    def __init__(self, node_id: str, overflow: float):
        super().__init__(f"Node {node_id} overflows its page", f"{overflow:.1f} over the box height")
        self.node_id = node_id
        self.overflow = overflow


class LayoutError(DocuGeniusError):
    """Exception raised when pagination fails to converge."""

    pass


class ConfigurationError(DocuGeniusError):
    """Exception raised for invalid editor options."""

    pass
