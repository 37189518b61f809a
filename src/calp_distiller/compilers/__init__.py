"""Compilers for assembling finished documents."""

from .compiler import Compiler, CompilerError, EmptyPublicationError, ImageDecodeError
from .pdf_compiler import PDFCompiler, fit_rect, sanitize_filename

__all__ = [
    "Compiler",
    "CompilerError",
    "EmptyPublicationError",
    "ImageDecodeError",
    "PDFCompiler",
    "fit_rect",
    "sanitize_filename",
]
