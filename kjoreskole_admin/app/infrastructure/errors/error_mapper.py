from kjoreskole_admin.clients.kjoreskole_sdk.errors import ApiError


class ErrorMapper:
    _KNOWN_CODES = {
        "TIMEOUT_ERROR": ("Serveren brukte for lang tid på å svare.", "Trykk «Prøv igjen»."),
        "NETWORK_ERROR": ("Ingen forbindelse til API-et.", "Sjekk nettverket og prøv igjen."),
        "VALIDATION_ERROR": ("Forespørselen inneholder ugyldige data.", "Kontroller feltene og prøv igjen."),
        "INTERNAL_ERROR": ("Intern feil i tjenesten.", "Prøv igjen om litt."),
    }

    _STATUS_HINTS = {
        401: ("UNAUTHORIZED", "Økten er utløpt.", "Logg inn på nytt."),
        403: ("PERMISSION_DENIED", "Du har ikke tilgang til denne operasjonen.", "Kontakt administrator."),
        404: ("NOT_FOUND", "Elementet finnes ikke lenger.", "Oppdater listen."),
        409: ("CONFLICT", "Elementet er endret eller i bruk.", "Oppdater listen og prøv igjen."),
        422: ("VALIDATION_ERROR", "Forespørselen inneholder ugyldige data.", "Kontroller feltene og prøv igjen."),
        500: ("INTERNAL_ERROR", "Intern feil i tjenesten.", "Prøv igjen, og oppgi trace_id hvis feilen vedvarer."),
    }

    @classmethod
    def to_payload(cls, error: Exception) -> dict:
        if isinstance(error, ApiError):
            status_code = error.status_code or -1
            mapped = cls._STATUS_HINTS.get(status_code)
            if mapped is None and status_code >= 500:
                mapped = cls._STATUS_HINTS[500]
            if mapped is not None:
                code, message, suggestion = mapped
            else:
                message, suggestion = cls._KNOWN_CODES.get(
                    error.code,
                    (error.message, "Kontakt support og oppgi trace_id."),
                )
                code = error.code
            return {
                "code": code,
                "message": message,
                "details": error.details,
                "trace_id": error.trace_id,
                "suggestion": suggestion,
            }
        return {
            "code": "INTERNAL_ERROR",
            "message": str(error),
            "details": None,
            "trace_id": None,
            "suggestion": "Prøv igjen, og meld fra hvis feilen vedvarer.",
        }

    @classmethod
    def to_display_message(cls, error: Exception) -> str:
        return cls.format_payload(cls.to_payload(error))

    @staticmethod
    def format_payload(payload: dict) -> str:
        return f"[{payload.get('code')}] {payload.get('message')} (trace_id={payload.get('trace_id')})"
