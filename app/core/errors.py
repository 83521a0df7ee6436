"""
Domain errors shared by inventory, sales and finance.

Services raise these; API views turn them into JSON through
``core.api.json_error``. Database errors are never wrapped.
"""


class DomainError(Exception):
    status_code = 400
    code = "domain_error"

    def __init__(self, message, *, code=None, **payload):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.payload = payload

    def as_dict(self):
        return {"error": self.message, "code": self.code, **self.payload}


class ValidationError(DomainError):
    """Malformed or out-of-range input. Nothing is written."""

    code = "validation_error"


class MissingBuyerError(DomainError):
    code = "missing_buyer"


class NotFoundError(DomainError):
    status_code = 404
    code = "not_found"


class ConflictError(DomainError):
    """The parcel (or reservation) is no longer in the expected status."""

    status_code = 409
    code = "conflict"


class DuplicateBuyerError(DomainError):
    status_code = 409
    code = "duplicate_buyer"

    def __init__(self, buyer, field):
        labels = {
            "name": f'nom "{buyer.name}"',
            "phone": f'téléphone "{buyer.phone}"',
            "cni_number": f'CNI "{buyer.cni_number}"',
        }
        super().__init__(
            f"Un acquéreur avec le même {labels.get(field, field)} existe déjà. "
            "Veuillez le sélectionner dans la liste.",
            acquereur_id=buyer.pk,
            acquereur_name=buyer.name,
            field=field,
        )
        self.buyer = buyer
        self.field = field
