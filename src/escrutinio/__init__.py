#   Init   Module
# AUTO-DOC-INDEX
#
# ES: Índice rápido
#   1) Propósito del módulo
#   2) Componentes principales
#   3) Puntos de extensión
#
# EN: Quick index
#   1) Module purpose
#   2) Main components
#   3) Extension points

"""Escrutinio: motor de actas, agregación y reportes electorales.

Escrutinio: electoral record tally, aggregation and reporting engine.
"""

__version__ = "0.1.0"
