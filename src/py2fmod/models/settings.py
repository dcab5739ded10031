"""Importer settings model."""

from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, List, Optional, Tuple

from py2fmod.core.telnet_protocol import CONNECT_TIMEOUT, DEFAULT_HOST, DEFAULT_PORT
from py2fmod.models.connection import ConnectionConfig
from py2fmod.models.file_group import SuffixRules


@dataclass
class ImporterSettings:
    """
    Operator-editable importer settings.

    The core only reads these: the endpoint when connecting and the suffixes
    at the start of each classification run (through ``suffix_rules()``).

    Attributes:
        host: Console host (default: loopback)
        port: Console port (default: 3663)
        multi_suffix: Filename suffix for Multi instruments
        scatterer_suffix: Filename suffix for Scatterer instruments
        spatializer_suffix: Filename suffix marking spatialized events
        template_dir: Directory holding the two script templates, None for the working directory
        log_file: Optional application log file
        connect_timeout: Connect bound in seconds
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    multi_suffix: str = "_m"
    scatterer_suffix: str = "_c"
    spatializer_suffix: str = "_s"
    template_dir: Optional[str] = None
    log_file: Optional[str] = None
    connect_timeout: float = CONNECT_TIMEOUT

    def suffix_rules(self) -> SuffixRules:
        """Snapshot of the suffix configuration for one classification run."""
        return SuffixRules(
            multi=self.multi_suffix or "",
            scatterer=self.scatterer_suffix or "",
            spatializer=self.spatializer_suffix or "",
        )

    def to_connection_config(self) -> ConnectionConfig:
        return ConnectionConfig(host=self.host, port=self.port, timeout=self.connect_timeout)

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Validate endpoint and suffixes.

        Returns:
            Tuple of (is_valid, list_of_error_messages)
        """
        _, errors = self.to_connection_config().validate()

        multi = (self.multi_suffix or "").lower()
        scatterer = (self.scatterer_suffix or "").lower()
        if multi and multi == scatterer:
            errors.append(f"Multi and Scatterer suffixes must differ: {self.multi_suffix!r}")

        return (len(errors) == 0, errors)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImporterSettings":
        """Create settings from a dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in (data or {}).items() if k in valid_fields}
        if 'port' in filtered and filtered['port'] is not None:
            filtered['port'] = int(filtered['port'])
        if 'connect_timeout' in filtered and filtered['connect_timeout'] is not None:
            filtered['connect_timeout'] = float(filtered['connect_timeout'])
        return cls(**filtered)
