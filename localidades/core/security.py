"""
Validación del token Bearer.

Sólo se verifica que el token exista y no esté vacío; no se decodifican
ni se validan los claims.
"""
from typing import Optional


def validar_token(token: Optional[str]) -> bool:
    """Indica si el token tiene la forma mínima esperada (no vacío)"""
    if token is None:
        return False
    return bool(token.strip())
