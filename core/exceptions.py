"""
Excepciones de dominio del pipeline de inventario.

Ninguna de estas excepciones cruza el borde de una tarea Celery o de un
handler: se registran en logs y el trabajo se da por terminado para esa
invocación.
"""


class StockPipelineError(Exception):
    """Error base del pipeline de inventario."""
    default_detail = "Error en el pipeline de inventario."
    default_code = "STOCK_PIPELINE_ERROR"

    def __init__(self, detail=None, *, extra=None):
        self.detail = detail or self.default_detail
        self.extra = extra or {}
        super().__init__(self.detail)


class MissingReferenceError(StockPipelineError):
    """El producto, variante u orden referenciada ya no existe."""
    default_detail = "El recurso referenciado no existe."
    default_code = "MISSING_REFERENCE"

    def __init__(self, model_name=None, pk=None, **kwargs):
        detail = kwargs.pop("detail", None)
        if detail is None and model_name:
            detail = f"{model_name} {pk} no existe."
        extra = kwargs.pop("extra", {})
        if model_name:
            extra.update({"model": model_name, "pk": str(pk)})
        super().__init__(detail, extra=extra)


class InvalidStateTransitionError(StockPipelineError):
    """Excepción cuando se intenta una transición de estado inválida."""
    default_detail = "Transición de estado no permitida."
    default_code = "INVALID_STATE_TRANSITION"

    def __init__(self, current_state=None, target_state=None, **kwargs):
        detail = self.default_detail
        extra = kwargs.pop("extra", {})

        if current_state and target_state:
            detail = f"No se puede cambiar de '{current_state}' a '{target_state}'."
            extra["current_state"] = current_state
            extra["target_state"] = target_state

        super().__init__(detail, extra=extra)
