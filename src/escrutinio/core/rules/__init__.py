"""Reglas de consistencia de actas. / Record consistency rules."""
