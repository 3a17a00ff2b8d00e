from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import quote, urlencode

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError

from bricksql.common.errors import InvalidPayload
from bricksql.common.settings import Settings


class ConnectionConfig(BaseModel):
    """Resolved connection settings; immutable for the lifetime of a handle.

    Attributes:
        host (str): Workspace host name of the remote engine.
        http_path (str): HTTP path of the SQL warehouse.
        catalog (str): Namespace root injected into statements.
        credential (SecretStr): Access token.
        row_cap (int): Default LIMIT appended to uncapped statements; 0 disables it.
        statement_timeout (float): Seconds allowed for every remote call.
        retry_count (int): Connection acquisition attempts.
        retry_pause (float): Seconds between attempts.
        retry_timeout (float): Total seconds allowed for all attempts.
        sqlalchemy_url (Optional[str]): Explicit URL overriding the assembled one.
        debug (bool): Verbose logging.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    host: str = ""
    http_path: str = Field(default="", alias="path")
    catalog: str = ""
    credential: SecretStr = Field(default=SecretStr(""), exclude=True)
    row_cap: int = Field(default=10000, ge=0, alias="maxRows")
    statement_timeout: float = Field(default=60, gt=0, alias="timeout")
    retry_count: int = Field(default=5, ge=0, alias="retries")
    retry_pause: float = Field(default=0, ge=0, alias="pause")
    retry_timeout: float = Field(default=40, ge=0, alias="retryTimeout")
    sqlalchemy_url: Optional[str] = Field(default=None, alias="sqlalchemyUrl")
    debug: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConnectionConfig":
        return cls(
            host=settings.host,
            http_path=settings.http_path,
            catalog=settings.catalog,
            credential=settings.token,
            row_cap=settings.max_rows,
            statement_timeout=settings.statement_timeout_sec,
            retry_count=settings.retries,
            retry_pause=settings.retry_pause_sec,
            retry_timeout=settings.retry_timeout_sec,
            sqlalchemy_url=settings.sqlalchemy_url,
            debug=settings.debug,
        )

    def build_url(self) -> str:
        """SQLAlchemy URL for this config, using the databricks dialect unless overridden."""
        if self.sqlalchemy_url:
            return self.sqlalchemy_url
        token = quote(self.credential.get_secret_value(), safe="")
        query: Dict[str, str] = {"http_path": self.http_path}
        if self.catalog:
            query["catalog"] = self.catalog
        return f"databricks://token:{token}@{self.host}?{urlencode(query)}"

    def __str__(self):
        return f"{self.host or self.sqlalchemy_url} (catalog={self.catalog})"


def load_plugin_settings(
    json_data: Union[bytes, str, Mapping[str, Any], None],
    secure_json_data: Optional[Mapping[str, str]] = None,
) -> ConnectionConfig:
    """Builds a ConnectionConfig from a host's instance-settings payload.

    Args:
        json_data: The non-secret settings, as raw JSON or an already-decoded mapping.
            Keys are camelCase (`host`, `path`, `catalog`, `retries`, `pause`,
            `timeout`, `maxRows`, `retryTimeout`, `debug`).
        secure_json_data: Decrypted secrets; the credential is read from `token`.

    Raises:
        InvalidPayload: The JSON is malformed or a value is out of range.
    """
    if json_data is None or json_data == b"" or json_data == "":
        raw: Dict[str, Any] = {}
    elif isinstance(json_data, (bytes, str)):
        try:
            raw = json.loads(json_data)
        except json.JSONDecodeError as e:
            raise InvalidPayload(f"could not unmarshal settings json: {e}") from e
    else:
        raw = dict(json_data)

    if not isinstance(raw, dict):
        raise InvalidPayload("could not unmarshal settings json: expected an object")

    secrets = secure_json_data or {}
    try:
        return ConnectionConfig.model_validate({**raw, "credential": secrets.get("token", "")})
    except ValidationError as e:
        raise InvalidPayload(f"invalid settings: {e.errors()[0].get('msg', e)}") from e
