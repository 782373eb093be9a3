from app.errors import (
    AmbiguousAddressError,
    ErrorResponse,
    InvalidLineNumberError,
    McpError,
    error_response,
    success_response,
)


def test_error_response_serializes_details():
    error = ErrorResponse(code="PATH_TRAVERSAL", message="Nope", details={"path": ".."})

    assert error.to_dict() == {
        "code": "PATH_TRAVERSAL",
        "message": "Nope",
        "details": {"path": ".."},
    }


def test_mcp_error_defaults_details():
    exc = McpError("INVALID_TYPE", "Bad path")

    assert exc.error.to_dict() == {
        "code": "INVALID_TYPE",
        "message": "Bad path",
        "details": {},
    }


def test_task_errors_are_mcp_errors():
    invalid = InvalidLineNumberError("a.md", 9, 3)
    ambiguous = AmbiguousAddressError()

    assert isinstance(invalid, McpError)
    assert invalid.error.details == {"path": "a.md", "lineNumber": 9, "lineCount": 3}
    assert ambiguous.error.code == "AMBIGUOUS_ADDRESS"


def test_envelopes():
    assert success_response({"tasks": []}) == {"ok": True, "data": {"tasks": []}}
    assert error_response(ErrorResponse("X", "y")) == {
        "ok": False,
        "error": {"code": "X", "message": "y", "details": {}},
    }
