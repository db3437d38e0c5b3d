"""
Shared user-facing error messages.

Every rejected action maps to one actionable message naming the field or
precondition at fault.
"""
from src.invoicing.form_state import FormError
from src.invoicing.print_gate import PrintBlocker
from src.invoicing.service_factory import ServiceError


class AppErrors:
    """Centralized actionable error messages."""

    START_DATE_MISSING = "La date de début est incorrecte"
    DESCRIPTION_MISSING = "Il manque la description du service"
    INVALID_QUANTITY = "La quantité est invalide"
    INVALID_UNIT_PRICE = "Le prix unitaire est invalide"

    PAYMENT_DATE_MISSING = "Il faut choisir une date de paiement"
    CLIENT_NAME_MISSING = "Il manque le nom du client"
    ADDRESS_MISSING = "Il manque l'adresse du client"
    NO_SERVICES = "Ajoutez au moins une prestation"

    UNKNOWN_SERVICE = "Cette prestation n'existe pas"
    NO_PRINTED_INVOICE = "Aucune facture n'a encore été imprimée"
    PRINT_FAILED = "L'impression a échoué, la facture n'a pas été enregistrée"
    INVALID_BODY = "Le corps de la requête doit être un objet JSON"

    @staticmethod
    def invalid_date(field: str) -> str:
        return f"Date invalide pour le champ '{field}' (format attendu AAAA-MM-JJ)"


_MESSAGES = {
    ServiceError.START_DATE_MISSING: AppErrors.START_DATE_MISSING,
    ServiceError.DESCRIPTION_MISSING: AppErrors.DESCRIPTION_MISSING,
    ServiceError.INVALID_QUANTITY: AppErrors.INVALID_QUANTITY,
    ServiceError.INVALID_UNIT_PRICE: AppErrors.INVALID_UNIT_PRICE,
    PrintBlocker.PAYMENT_DATE_MISSING: AppErrors.PAYMENT_DATE_MISSING,
    PrintBlocker.CLIENT_NAME_MISSING: AppErrors.CLIENT_NAME_MISSING,
    PrintBlocker.ADDRESS_MISSING: AppErrors.ADDRESS_MISSING,
    PrintBlocker.NO_SERVICES: AppErrors.NO_SERVICES,
    FormError.UNKNOWN_SERVICE: AppErrors.UNKNOWN_SERVICE,
}


def format_validation_error(reason) -> str:
    """Message for a ServiceError, PrintBlocker or FormError."""
    return _MESSAGES[reason]
