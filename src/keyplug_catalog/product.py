"""Product key derivation."""

import hashlib

from keyplug_interceptors import TargetOperation

SUBJECT = "catalog.product"


class ProductKeyService:
    """Derives product keys from SKUs."""

    def derive_key(self, sku: str) -> str:
        """Compute the SHA-256 hex digest of a SKU."""
        return hashlib.sha256(sku.encode('utf-8')).hexdigest()

    def target(self) -> TargetOperation:
        """Expose ``derive_key`` as an interceptable target."""
        return TargetOperation(
            subject=SUBJECT,
            name="derive_key",
            func=self.derive_key,
            arg_types=(str,)
        )


DERIVE_KEY = f"{SUBJECT}.derive_key"
