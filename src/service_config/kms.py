"""
AWS KMS key-wrap service.

Encrypts secret plaintext under a managed KMS key and returns the ciphertext
blob as base64 text, ready to be decrypted by the deployed service at runtime.
"""

import base64
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError, ProfileNotFound

from .exceptions import AuthenticationError, EncryptionError

logger = logging.getLogger(__name__)


class KeyWrapService:
    """Envelope encryption through AWS KMS."""

    def __init__(self, region_name: str, profile_name: str | None = None, client=None):
        self.region_name = region_name
        self.profile_name = profile_name
        self._client = client

    @property
    def client(self):
        """Lazy initialization of the KMS client.

        A named profile loads that profile's shared credentials; otherwise the
        default boto3 credential chain applies.
        """
        if self._client is None:
            session = boto3.Session(profile_name=self.profile_name)
            self._client = session.client("kms", region_name=self.region_name)
        return self._client

    def encrypt(self, key_id: str, plaintext: str) -> str:
        """Encrypt plaintext under key_id and return base64 ciphertext."""
        try:
            response = self.client.encrypt(KeyId=key_id, Plaintext=plaintext.encode("utf-8"))
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            raise EncryptionError(
                f"KMS rejected encrypt request ({code}): {e}",
                context={"key_id": key_id, "region": self.region_name, "code": code},
            ) from e
        except (ProfileNotFound, NoCredentialsError) as e:
            raise AuthenticationError(
                f"Unable to resolve AWS credentials: {e}",
                context={"profile": self.profile_name, "region": self.region_name},
            ) from e
        except BotoCoreError as e:
            raise EncryptionError(
                f"KMS encrypt request failed: {e}",
                context={"key_id": key_id, "region": self.region_name},
            ) from e

        return base64.b64encode(response["CiphertextBlob"]).decode("ascii")
