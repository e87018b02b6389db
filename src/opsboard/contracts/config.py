"""Configuration contracts."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class ListNames(BaseModel):
    """Remote list name (or id) per logical list kind."""

    tasks: str = "Tarefas_Checklist"
    operations: str = "Operacoes_Checklist"
    status: str = "Status_Checklist"
    history: str = "Historico_checklist_web"
    team: str = "Usuarios_cco"
    route_configs: str = "CONFIG_SAIDA_DE_ROTAS"
    departures: str = "Dados_Saida_de_rotas"
    departures_archive: str = "856bf9d5-6081-4360-bcad-e771cbabfda8"
    route_mappings: str = "Rotas_Operacao_Checklist"
    warnings: str = "avisos_diarios_checklist"

    def get(self, kind: str) -> str:
        name = getattr(self, kind, None)
        if not isinstance(name, str):
            raise KeyError(kind)
        return name


class LlmConfig(BaseModel):
    model: str = "gemini-2.5-flash"
    api_key_env: str = "GEMINI_API_KEY"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout: float = Field(default=60.0, gt=0)


class OpsBoardConfig(BaseModel):
    store: str = "graph"
    site_path: str
    base_url: str = "https://graph.microsoft.com/v1.0"
    auth: str = "env"
    token: str | None = None
    lists: ListNames = Field(default_factory=ListNames)
    # The warnings list keeps its route in a plain "rota" column, not the title.
    field_overrides: dict[str, dict[str, str]] = Field(default_factory=lambda: {"warnings": {"rota": "rota"}})
    system_user: str = "Sistema"
    max_concurrent: int = Field(default=4, ge=1, le=10)
    default_team: list[str] = Field(default_factory=lambda: ["Logística 1", "Logística 2", "Supervisor"])
    llm: LlmConfig = Field(default_factory=LlmConfig)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_auth_token(self) -> OpsBoardConfig:
        token = (self.token or "").strip()
        if self.auth == "token":
            if not token:
                raise ValueError("token auth requires a non-empty token")
            return self
        if token:
            raise ValueError("token must be unset when auth is not 'token'")
        if self.auth != "env":
            raise ValueError("auth must be one of: env, token")
        return self

    @model_validator(mode="after")
    def validate_override_kinds(self) -> OpsBoardConfig:
        unknown = sorted(kind for kind in self.field_overrides if kind not in ListNames.model_fields)
        if unknown:
            raise ValueError(f"field_overrides has unknown list kinds: {', '.join(unknown)}")
        return self
