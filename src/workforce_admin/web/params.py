"""Small helpers for reading JSON bodies and query strings in controllers."""

from __future__ import annotations

from datetime import date, time
from typing import Any, Optional

from flask import jsonify, request

from ..common.datetime_utils import parse_iso_date, parse_optional_date, parse_optional_time, parse_time
from ..common.validators import require_positive_id
from ..core.exceptions import ValidationError


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def ok(payload: Any = None, status: int = 200, **extra: Any):
    body = {"success": True}
    if payload is not None:
        body["data"] = payload
    body.update(extra)
    return jsonify(body), status


def required(data: dict, key: str) -> Any:
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"Missing field: {key}")
    return value


def body_date(data: dict, key: str) -> date:
    return parse_iso_date(str(required(data, key)))


def body_optional_date(data: dict, key: str) -> Optional[date]:
    return parse_optional_date(data.get(key))


def body_time(data: dict, key: str) -> time:
    return parse_time(str(required(data, key)))


def body_optional_time(data: dict, key: str) -> Optional[time]:
    return parse_optional_time(data.get(key))


def body_id(data: dict, key: str) -> int:
    return require_positive_id(required(data, key), key)


def body_optional_id(data: dict, key: str) -> Optional[int]:
    value = data.get(key)
    if value in (None, ""):
        return None
    return require_positive_id(value, key)


def body_ids(data: dict, key: str) -> list[int]:
    values = data.get(key) or []
    if not isinstance(values, list):
        raise ValidationError(f"{key} must be a list")
    return [require_positive_id(v, key) for v in values]


def arg_date(key: str, default: Optional[date] = None) -> Optional[date]:
    value = request.args.get(key)
    if not value:
        return default
    return parse_iso_date(value)


def arg_id(key: str) -> Optional[int]:
    value = request.args.get(key)
    if not value:
        return None
    return require_positive_id(value, key)


def arg_bool(key: str) -> Optional[bool]:
    value = request.args.get(key)
    if value is None or value == "":
        return None
    return value.lower() in ("1", "true", "yes", "on")


def patch_body(*reserved: str) -> dict:
    """JSON body for a partial update; keys naming the target row are refused."""

    data = json_body()
    for key in reserved:
        if key in data:
            raise ValidationError(f"Field cannot be changed: {key}")
    return data


def _present(value: Any) -> bool:
    return value is not None and not (isinstance(value, str) and not value.strip())


def convert_dates(data: dict, *keys: str, nullable: tuple = ()) -> dict:
    """Copy of `data` with the given keys parsed as dates when present.

    A key outside `nullable` may not be cleared with null or an empty string.
    """

    out = dict(data)
    for key in keys:
        if key in out:
            if key not in nullable and not _present(out[key]):
                raise ValidationError(f"Missing field: {key}")
            out[key] = parse_optional_date(out[key])
    return out


def convert_times(data: dict, *keys: str, nullable: tuple = ()) -> dict:
    out = dict(data)
    for key in keys:
        if key in out:
            if key not in nullable and not _present(out[key]):
                raise ValidationError(f"Missing field: {key}")
            out[key] = parse_optional_time(out[key])
    return out
