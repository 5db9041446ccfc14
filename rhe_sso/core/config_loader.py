"""
RHE SSO - Config Loader Implementation
Charge la configuration d'un broker depuis un fichier YAML.
"""

from pathlib import Path
from typing import Any, Dict

import pydantic
import yaml

from .interfaces import BrokerConfig, IConfigLoader, InvalidTimeoutError


class ConfigIntegrityError(Exception):
    """Erreur d'intégrité de configuration."""

    pass


class ConfigLoader(IConfigLoader):
    """Chargement des configurations broker depuis fichiers YAML."""

    REQUIRED_FIELDS = ("broker_id", "broker_secret", "api_endpoint", "auth_endpoint")
    RESERVED_FIELDS = ("credentials",)

    def load(self, path: str) -> BrokerConfig:
        """
        Charge la config d'un broker.

        Args:
            path: Chemin du fichier YAML

        Returns:
            Configuration validée

        Raises:
            ConfigIntegrityError: Si fichier inexistant ou structure invalide
        """
        config_file = Path(path)

        if not config_file.exists():
            raise ConfigIntegrityError(f"Configuration non trouvée: {path}")

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigIntegrityError(f"Erreur de parsing YAML: {e}")
        except OSError as e:
            raise ConfigIntegrityError(f"Erreur de lecture fichier: {e}")

        if not isinstance(data, dict):
            raise ConfigIntegrityError("Configuration doit être un objet YAML")

        return self.from_mapping(data)

    def from_mapping(self, data: Dict[str, Any]) -> BrokerConfig:
        """
        Construit une config depuis un dictionnaire à plat.

        Raises:
            ConfigIntegrityError: Champ obligatoire manquant ou valeur invalide
        """
        for field in self.REQUIRED_FIELDS:
            if field not in data:
                raise ConfigIntegrityError(f"Champ obligatoire manquant: {field}")

        for field in self.RESERVED_FIELDS:
            if field in data:
                raise ConfigIntegrityError(f"Champ réservé: {field}")

        options = {k: v for k, v in data.items() if k not in self.REQUIRED_FIELDS}

        try:
            return BrokerConfig.create(
                broker_id=data["broker_id"],
                broker_secret=data["broker_secret"],
                api_endpoint=data["api_endpoint"],
                auth_endpoint=data["auth_endpoint"],
                **options,
            )
        except (pydantic.ValidationError, InvalidTimeoutError, TypeError) as e:
            raise ConfigIntegrityError(f"Configuration invalide: {e}")
