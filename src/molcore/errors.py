"""Excepciones específicas del grafo molecular."""


class MolGraphError(Exception):
    """Error base para operaciones inválidas sobre `MolGraph`."""


class InvalidBondError(MolGraphError):
    """Se lanza al crear un enlace consigo mismo, duplicado o sin extremos."""


class UnknownElementError(MolGraphError):
    """Se lanza cuando el símbolo no existe en la tabla periódica."""
