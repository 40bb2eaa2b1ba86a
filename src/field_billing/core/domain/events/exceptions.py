class FieldBillingError(Exception):
    """Classe base para todas as exceções do núcleo de cobrança."""
    pass

class ValidationError(FieldBillingError):
    """
    Violação de regra detectada antes de qualquer mutação.
    Exemplos:
    - Valor de pagamento zero ou negativo.
    - Motivo de cancelamento vazio.
    - Valor recebido negativo em correção manual.
    """
    pass

class ScheduleValidationError(ValidationError):
    """Lote de agendamento bloqueado (data passada ou não configurada)."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))

class ConfirmationRequiredError(ValidationError):
    """
    Regra "soft": a operação é permitida, mas só após confirmação explícita
    do usuário (flag `confirm_*` no comando).
    """
    pass

class ScheduleConflictError(ConfirmationRequiredError):
    def __init__(self, conflicts: list[str]):
        self.conflicts = list(conflicts)
        super().__init__("Conflitos de horário: " + "; ".join(self.conflicts))

class ExcessPaymentError(ConfirmationRequiredError):
    """Pagamento maior que o saldo devedor da venda/cliente."""

    def __init__(self, amount: float, remaining_balance: float):
        self.amount = amount
        self.remaining_balance = remaining_balance
        super().__init__(
            f"O valor informado ({amount:.2f}) é maior que o saldo devedor ({remaining_balance:.2f})"
        )

class OverpaymentError(ConfirmationRequiredError):
    """Valor recebido maior que o valor original da parcela/venda."""

    def __init__(self, amount: float, limit: float):
        self.amount = amount
        self.limit = limit
        super().__init__(f"O valor informado ({amount:.2f}) é maior que o valor original ({limit:.2f})")

class NotFoundError(FieldBillingError):
    pass

class InvalidVisitTransitionError(FieldBillingError):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Transição de visita inválida: {current} -> {target}")

class RecordStoreError(FieldBillingError):
    """
    Falha de persistência no banco externo (indisponível, 4xx/5xx, payload inválido).
    """

    def __init__(self, message: str, *, table: str | None = None, status_code: int | None = None):
        self.table = table
        self.status_code = status_code
        super().__init__(message)
