from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = Field(default="graphsync", alias="APP_NAME")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Search engine (Elasticsearch)
    # One or more comma-separated node URLs.
    es_host_name: str = Field(default="http://localhost:9200", alias="ES_HOST_NAME")
    es_index_spec: str = Field(default="", alias="ES_INDEX_SPEC")
    es_discovery: bool = Field(default=False, alias="ES_DISCOVERY")
    es_include_id_field: bool = Field(default=True, alias="ES_INCLUDE_ID_FIELD")
    es_include_labels_field: bool = Field(default=True, alias="ES_INCLUDE_LABELS_FIELD")
    es_include_db_field: bool = Field(default=False, alias="ES_INCLUDE_DB_FIELD")
    es_type_mapping: bool = Field(default=False, alias="ES_TYPE_MAPPING")
    es_async: bool = Field(default=True, alias="ES_ASYNC")
    es_user: str | None = Field(default=None, alias="ES_USER")
    es_password: str | None = Field(default=None, alias="ES_PASSWORD")
    es_request_timeout_sec: float | None = Field(default=None, alias="ES_REQUEST_TIMEOUT_SEC")
    es_verify_certs: bool = Field(default=True, alias="ES_VERIFY_CERTS")
    es_scope_document_ids: bool = Field(default=True, alias="ES_SCOPE_DOCUMENT_IDS")
    es_reindex_batch_size: int = Field(default=500, ge=1, alias="ES_REINDEX_BATCH_SIZE")
    es_reindex_async: bool = Field(default=False, alias="ES_REINDEX_ASYNC")

    # Neo4j (node source for re-index jobs; its name also scopes document ids)
    neo4j_uri: str = Field(default="bolt://localhost:7687", alias="NEO4J_URI")
    neo4j_user: str = Field(default="neo4j", alias="NEO4J_USER")
    neo4j_password: str = Field(default="", alias="NEO4J_PASSWORD")
    neo4j_database: str = Field(default="neo4j", alias="NEO4J_DATABASE")

    def es_hosts_list(self) -> list[str]:
        hosts = (host.strip() for host in (self.es_host_name or "").split(","))
        return [host for host in hosts if host]

    def database_name(self) -> str | None:
        return (self.neo4j_database or "").strip() or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
