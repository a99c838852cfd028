from typing import Optional

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt only looks at the first 72 bytes of a secret
BCRYPT_MAX_BYTES = 72

class Hasher:
    @staticmethod
    def _truncate_password(password: str) -> str:
        """
        Truncate password to 72 bytes for bcrypt compatibility.
        Ensures we don't break multi-byte UTF-8 characters.
        """
        encoded = password.encode('utf-8')
        if len(encoded) <= BCRYPT_MAX_BYTES:
            return password

        truncated = encoded[:BCRYPT_MAX_BYTES]
        # Drop an incomplete multi-byte character at the end
        return truncated.decode('utf-8', errors='ignore')

    @staticmethod
    def hash_password(password: str) -> str:
        password = Hasher._truncate_password(password)
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
        if not hashed_password:
            # OAuth-only accounts have no local password
            return False
        plain_password = Hasher._truncate_password(plain_password)
        return pwd_context.verify(plain_password, hashed_password)
