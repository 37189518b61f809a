"""Base class for document compilers."""

from abc import ABC, abstractmethod
from pathlib import Path

from schemas.content import PageSequence


class CompilerError(Exception):
    """Base exception for errors raised while compiling a document."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class EmptyPublicationError(CompilerError):
    """Raised when a publication has no content units to compile."""

    pass


class ImageDecodeError(CompilerError):
    """Raised when a page image cannot be decoded.

    Attributes:
        path: The image file that failed to decode
    """

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Error adding image {path}: {reason}")


class Compiler(ABC):
    """Abstract base class for document compilers.

    Compilers lay out the assembled content units of one publication and
    write the finished document.
    """

    @abstractmethod
    def compile(self, sequence: PageSequence) -> Path:
        """Compile a publication into a document.

        Args:
            sequence: Assembled content units of the publication

        Returns:
            Path of the written document
        """
        pass
