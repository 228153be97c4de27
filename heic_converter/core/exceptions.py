from typing import Dict, List, Optional, TypedDict, Union


class ValidationDetails(TypedDict, total=False):
    """Type-safe details for validation errors."""

    field_name: str
    field_value: Union[str, int, float, bool]
    expected_values: List[str]
    constraints: str


class CodecDetails(TypedDict, total=False):
    """Type-safe details for decode/encode errors."""

    output_format: str
    quality: int
    input_size: int
    error: str


class FormatDetails(TypedDict, total=False):
    """Type-safe details for format errors."""

    requested_format: str
    supported_formats: List[str]


class ArchiveDetails(TypedDict, total=False):
    """Type-safe details for archive errors."""

    entry_count: int
    error: str


class ResourceDetails(TypedDict, total=False):
    """Type-safe details for resource handle errors."""

    url: str
    reason: str


class ConfigDetails(TypedDict, total=False):
    """Type-safe details for configuration errors."""

    config_key: str
    config_value: Union[str, int, float, bool]
    valid_options: List[Union[str, int]]


ErrorDetails = Union[
    ValidationDetails,
    CodecDetails,
    FormatDetails,
    ArchiveDetails,
    ResourceDetails,
    ConfigDetails,
    Dict[str, Union[str, int, float, bool, List[str]]],  # Fallback for edge cases
]


class ImageConverterError(Exception):
    """Base exception for all HEIC converter errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        details: Optional[ErrorDetails] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(ImageConverterError):
    """Raised when a candidate file is rejected by the acceptance policy."""

    def __init__(self, message: str, details: Optional[ValidationDetails] = None):
        super().__init__(message=message, error_code="CONV002", details=details)


class ConfigurationError(ImageConverterError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, details: Optional[ConfigDetails] = None):
        super().__init__(message=message, error_code="CONV007", details=details)


class UnsupportedFormatError(ImageConverterError):
    """Raised when an output format is not supported."""

    def __init__(self, message: str, details: Optional[FormatDetails] = None):
        super().__init__(message=message, error_code="CONV102", details=details)


class CodecError(ImageConverterError):
    """Raised when decoding or encoding a single image fails."""

    def __init__(
        self,
        message: str,
        details: Optional[CodecDetails] = None,
        error_code: str = "CONV103",
    ):
        super().__init__(message=message, error_code=error_code, details=details)


class HeifDecodingError(CodecError):
    """Raised when HEIF/HEIC decoding fails."""

    def __init__(
        self,
        message: str = "Failed to decode HEIF/HEIC image",
        details: Optional[CodecDetails] = None,
    ):
        super().__init__(message=message, details=details, error_code="CONV202")


class ArchiveError(ImageConverterError):
    """Raised when bundling converted outputs into an archive fails."""

    def __init__(self, message: str, details: Optional[ArchiveDetails] = None):
        super().__init__(message=message, error_code="CONV301", details=details)


class ResourceHandleError(ImageConverterError):
    """Raised when a resource handle is used after revocation or is unknown."""

    def __init__(self, message: str, details: Optional[ResourceDetails] = None):
        super().__init__(message=message, error_code="CONV401", details=details)
