ERROR_LOG_LIMIT = 1000


def clip(text: str, limit: int) -> str:
    normalized = " ".join(text.split()).strip()
    if len(normalized) <= limit:
        return normalized
    return f"{normalized[:limit]}...(truncated)"


def extract_error_detail(exc: BaseException) -> str:
    status_code = getattr(exc, "status_code", None)
    message = getattr(exc, "message", None) or str(exc)
    body = getattr(exc, "body", None)
    details = [f"status_code={status_code}" if status_code is not None else ""]
    if body is not None:
        details.append(f"body={body}")
    details.append(f"message={message}")
    return clip(" ".join([part for part in details if part]).strip(), ERROR_LOG_LIMIT)
