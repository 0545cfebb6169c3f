"""
Dependencies para autenticación
"""
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from localidades.core.security import validar_token

security = HTTPBearer(auto_error=False, description="Token JWT; sólo se valida que exista")


async def requiere_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Exige un token Bearer presente y no vacío; no inspecciona claims"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Se requiere un token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not validar_token(credentials.credentials):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Token inválido",
        )

    return credentials.credentials
