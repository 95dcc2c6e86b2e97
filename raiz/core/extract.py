"""
Normalizers for package.json fields that the registry publishes either as a
plain string or as an object. Unknown shapes become an empty string.
"""
from typing import Any


def extract_license(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("type"), str):
        return value["type"]
    return ""


def extract_repository(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("url"), str):
        url = value["url"]
        if url.startswith("git+"):
            url = url[len("git+"):]
        if url.endswith(".git"):
            url = url[:-len(".git")]
        return url
    return ""


def extract_author(value: Any) -> str:
    if isinstance(value, str):
        return value
    if not isinstance(value, dict):
        return ""

    name = value.get("name")
    email = value.get("email")
    has_name = isinstance(name, str)
    has_email = isinstance(email, str)

    if has_name and has_email:
        return f"{name} <{email}>"
    if has_name:
        return name
    if has_email:
        return email
    return ""
