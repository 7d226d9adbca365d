# caminho: vending_admin/infrastructure/security/passwords.py
# Funções:
# - PasswordVerifier: compara senha em texto com hash bcrypt (pwdlib)
# - Falhas de qualquer tipo resultam em "não confere", sem distinguir o motivo

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pwdlib import PasswordHash
from pwdlib.exceptions import UnknownHashError
from pwdlib.hashers.bcrypt import BcryptHasher

_DUMMY_PASSWORD = 'amp-vending-dummy-password'


@lru_cache(maxsize=4)
def _build_hasher(rounds: int) -> PasswordHash:
    return PasswordHash((BcryptHasher(rounds=rounds),))


@lru_cache(maxsize=4)
def _dummy_hash(rounds: int) -> str:
    return _build_hasher(rounds).hash(_DUMMY_PASSWORD)


class PasswordVerifier:
    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds
        self._hasher = _build_hasher(rounds)

    def hash(self, plain: str) -> str:
        return self._hasher.hash(plain)

    def verify(self, plain: str, stored_hash: Optional[str]) -> bool:
        if not stored_hash:
            # Identidade inexistente ou só OAuth: mesmo custo de uma comparação real
            self._hasher.verify(plain, _dummy_hash(self._rounds))
            return False
        try:
            return self._hasher.verify(plain, stored_hash)
        except (UnknownHashError, ValueError):
            return False
