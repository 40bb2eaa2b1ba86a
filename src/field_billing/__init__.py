"""Núcleo de cobrança em campo: distribuição de pagamentos e agenda de visitas."""

__version__ = "0.1.0"
