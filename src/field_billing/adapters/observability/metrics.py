from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

registry = CollectorRegistry()

PAYMENTS_COUNT = Counter(
    "field_billing_payments_total",
    "Pagamentos processados por modo (venda, geral, correcao, edicao)",
    ["mode", "success"],
    registry=registry,
)

AMOUNT_DISTRIBUTED = Counter(
    "field_billing_amount_distributed_total",
    "Valor aplicado nas parcelas pelo motor de distribuicao",
    ["mode"],
    registry=registry,
)

PERSISTENCE_FAILURES = Counter(
    "field_billing_persistence_failures_total",
    "Gravacoes otimistas que falharam no banco externo",
    ["table"],
    registry=registry,
)

VISIT_TRANSITIONS = Counter(
    "field_billing_visit_transitions_total",
    "Transicoes de status de visitas",
    ["to_status"],
    registry=registry,
)

DISTRIBUTION_DURATION = Histogram(
    "field_billing_distribution_duration_seconds",
    "Duracao do processamento de um pagamento",
    ["mode"],
    registry=registry,
)


def metrics_payload() -> tuple[bytes, str]:
    return generate_latest(registry), CONTENT_TYPE_LATEST
