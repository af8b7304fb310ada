"""
Error types raised by netanalyzer.

All library errors share the ``NetworkAnalysisError`` base. Degenerate but
well-formed input (an empty graph, an unreachable target, a disconnected
graph) is answered with an empty or zero result instead of an error, so
the classes here are reserved for malformed records, bad parameters and
numerical failures.

Each error keeps two dictionaries next to its message: ``details``
describes the offending input and ``context`` the operation that was
running. Both are rendered into ``str(error)``.
"""

from typing import Dict, Any, Optional, List, Union
import traceback

# Collections whose repr is longer than this are summarised in messages
_MAX_RENDERED_LENGTH = 100


def _present(**fields: Any) -> Dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


def _render_item(key: str, value: Any) -> str:
    if isinstance(value, (list, dict, set)) and len(str(value)) > _MAX_RENDERED_LENGTH:
        return f"{key}=<{type(value).__name__} with {len(value)} items>"
    return f"{key}={value}"


class NetworkAnalysisError(Exception):
    """
    Root of the netanalyzer error hierarchy.

    Parameters
    ----------
    message : str
        What went wrong
    details : Dict[str, Any], optional
        Facts about the input that triggered the error
    cause : Exception, optional
        Lower-level exception being wrapped; also set as ``__cause__``
    context : Dict[str, Any], optional
        Facts about the operation in progress

    Examples
    --------
    >>> raise NetworkAnalysisError("Max flow failed", context={"source": "S"})
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.message = message
        self.details = details or {}
        self.cause = cause
        self.context = context or {}

        super().__init__(self._render())

        if cause is not None:
            self.__cause__ = cause

    def _render(self) -> str:
        text = self.message
        if self.details:
            text += " (Details: " + ", ".join(_render_item(k, v) for k, v in self.details.items()) + ")"
        if self.context:
            text += " (Context: " + ", ".join(f"{k}={v}" for k, v in self.context.items()) + ")"
        return text

    def add_context(self, **kwargs: Any) -> 'NetworkAnalysisError':
        """Merge ``kwargs`` into the context and return the error itself."""
        self.context.update(kwargs)
        return self

    def get_debug_info(self) -> Dict[str, Any]:
        """Everything known about the error, as a plain dictionary."""
        return {
            "exception_type": type(self).__name__,
            "message": self.message,
            "details": self.details,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "traceback": traceback.format_exc() if self.__traceback__ else None
        }


class ValidationError(NetworkAnalysisError):
    """
    Malformed input records or tables.

    Parameters
    ----------
    message : str
        What is wrong with the input
    field : str, optional
        Column, key or argument that failed the check
    value : Any, optional
        Offending value
    expected : str, optional
        What would have been accepted

    Examples
    --------
    >>> raise ValidationError("Column has null values", field="target")
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        self.field = field
        self.value = value
        self.expected = expected

        details = dict(details or {})
        details.update(_present(field=field, invalid_value=value, expected=expected))

        prefix = f"Validation error in field '{field}'" if field else "Validation error"
        super().__init__(f"{prefix}: {message}", details=details, **kwargs)


class GraphConstructionError(NetworkAnalysisError):
    """
    A graph could not be assembled from its nodes and edges.

    Raised for duplicate node or edge ids, edges whose endpoints are not
    nodes of the graph, and failed conversions to NetworkIt. The keyword
    arguments are stored as attributes and in ``context``.

    Examples
    --------
    >>> raise GraphConstructionError(
    ...     "Edge 'e7' references unknown source node '0xff'",
    ...     graph_type="directed",
    ...     operation="add_edges"
    ... )
    """

    def __init__(
        self,
        message: str,
        graph_type: Optional[str] = None,
        node_count: Optional[int] = None,
        edge_count: Optional[int] = None,
        operation: Optional[str] = None,
        **kwargs
    ) -> None:
        self.graph_type = graph_type
        self.node_count = node_count
        self.edge_count = edge_count
        self.operation = operation

        context = dict(kwargs.pop("context", None) or {})
        context.update(_present(
            graph_type=graph_type,
            node_count=node_count,
            edge_count=edge_count,
            operation=operation
        ))
        super().__init__(message, context=context, **kwargs)


class ConfigurationError(NetworkAnalysisError):
    """
    An algorithm parameter is out of range or not one of the allowed values.

    When both ``parameter`` and ``valid_options`` are given, the allowed
    values are appended to the message.

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "Unknown metric",
    ...     parameter="metric",
    ...     value="katz",
    ...     valid_options=["degree", "pagerank"]
    ... )
    """

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        value: Optional[Any] = None,
        valid_options: Optional[List[Any]] = None,
        function: Optional[str] = None,
        **kwargs
    ) -> None:
        self.parameter = parameter
        self.value = value
        self.valid_options = valid_options
        self.function = function

        details = dict(kwargs.pop("details", None) or {})
        details.update(_present(
            parameter=parameter,
            invalid_value=value,
            valid_options=valid_options or None,
            function=function
        ))

        if parameter and valid_options:
            message = f"{message}. Valid options for '{parameter}': {valid_options}"
        super().__init__(message, details=details, **kwargs)


class ComputationError(NetworkAnalysisError):
    """
    A numerical routine produced an unusable result.

    ``resource_info`` (input sizes and the like) is merged into
    ``details``; ``operation`` and ``error_type`` go to ``context``.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        error_type: Optional[str] = None,
        resource_info: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        self.operation = operation
        self.error_type = error_type
        self.resource_info = resource_info or {}

        context = dict(kwargs.pop("context", None) or {})
        context.update(_present(operation=operation, error_type=error_type))

        details = dict(kwargs.pop("details", None) or {})
        details.update(self.resource_info)

        super().__init__(message, details=details, context=context, **kwargs)


class DataFormatError(ValidationError):
    """An edge list could not be read: missing file, unparsable CSV or wrong type."""

    def __init__(
        self,
        message: str,
        format_type: Optional[str] = None,
        file_path: Optional[str] = None,
        **kwargs
    ) -> None:
        details = dict(kwargs.pop("details", None) or {})
        details.update(_present(format_type=format_type, file_path=file_path))
        super().__init__(message, details=details, **kwargs)


# Parameter checks shared by the algorithm modules

def validate_parameter(
    value: Any,
    valid_options: List[Any],
    parameter_name: str,
    function_name: Optional[str] = None
) -> None:
    """Raise ConfigurationError unless ``value`` is one of ``valid_options``."""
    if value not in valid_options:
        raise ConfigurationError(
            f"Invalid value for parameter '{parameter_name}': {value}",
            parameter=parameter_name,
            value=value,
            valid_options=valid_options,
            function=function_name
        )


def require_positive(
    value: Union[int, float],
    parameter_name: str,
    allow_zero: bool = False
) -> None:
    """
    Check that a numeric parameter is greater than zero.

    Parameters
    ----------
    value : Union[int, float]
        Value to check
    parameter_name : str
        Name used in the error message
    allow_zero : bool, default False
        Accept zero as well

    Raises
    ------
    ConfigurationError
        If the check fails
    """
    if allow_zero:
        if value < 0:
            raise ConfigurationError(
                f"Parameter '{parameter_name}' must be non-negative, got {value}",
                parameter=parameter_name,
                value=value
            )
    elif value <= 0:
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must be positive, got {value}",
            parameter=parameter_name,
            value=value
        )


def require_in_range(
    value: Union[int, float],
    parameter_name: str,
    low: float,
    high: float
) -> None:
    """Raise ConfigurationError unless ``low <= value <= high``."""
    if not (low <= value <= high):
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must be between {low} and {high}, got {value}",
            parameter=parameter_name,
            value=value
        )
