from typing import Any, Dict, Optional


def api_success(data: Any, message: Optional[str] = None, pagination: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
	body: Dict[str, Any] = {"success": True, "data": data, "error": None}
	if message is not None:
		body["message"] = message
	if pagination is not None:
		body["pagination"] = pagination
	return body


def api_error(code: str, message: str, details: Optional[Any] = None) -> Dict[str, Any]:
	error: Dict[str, Any] = {"code": code, "message": message}
	if details is not None:
		error["details"] = details
	return {"success": False, "data": None, "error": error}


def pagination_meta(limit: int, offset: int, count: int) -> Dict[str, int]:
	return {"limit": limit, "offset": offset, "count": count}
