"""
SmartOB Configuration Management

Loads and validates the strategy configuration files.
"""

import json
import logging
from typing import Dict, Any
from pathlib import Path
import jsonschema

from core.models.config import StrategyConfig

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent

CONFIG_FILES = {
    'strategy': 'strategy.json',
    'system': 'system.json',
}

# Files validated against a sibling "<name>.schema.json"
SCHEMA_VALIDATED = {'strategy'}


class ConfigLoader:
    """Loads and manages system configurations."""
    
    def __init__(self, config_dir=None):
        """
        Initialize configuration loader.
        
        Args:
            config_dir: Directory containing configuration files
        """
        self.config_dir = Path(config_dir) if config_dir else CONFIG_DIR
        self.configs = {}
        self._load_all_configs()
    
    def _load_all_configs(self) -> None:
        """Load all configuration files."""
        for config_name in CONFIG_FILES:
            self.configs[config_name] = self._load(config_name)
    
    def _load(self, config_name: str) -> Dict[str, Any]:
        config_path = self.config_dir / CONFIG_FILES[config_name]
        if not config_path.exists():
            logger.warning("config_missing", extra={"config": config_name, "path": str(config_path)})
            return {}
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if config_name in SCHEMA_VALIDATED:
            schema_path = self.config_dir / f'{config_name}.schema.json'
            if schema_path.exists():
                with open(schema_path, 'r', encoding='utf-8') as sf:
                    schema = json.load(sf)
                jsonschema.validate(instance=data, schema=schema)
        return data
    
    def get_config(self, config_name: str) -> Dict[str, Any]:
        """
        Get configuration by name.
        
        Args:
            config_name: Name of configuration
            
        Returns:
            Configuration dictionary
        """
        return self.configs.get(config_name, {})
    
    def get_all_configs(self) -> Dict[str, Dict[str, Any]]:
        """
        Get all configurations.
        
        Returns:
            Dictionary of all configurations
        """
        return {name: dict(cfg) for name, cfg in self.configs.items()}
    
    def reload_config(self, config_name: str) -> None:
        """
        Reload specific configuration.
        
        Args:
            config_name: Name of configuration to reload
        
        Raises:
            jsonschema.ValidationError: If the file no longer matches its schema;
                the previously loaded config is kept.
        """
        if config_name in CONFIG_FILES:
            self.configs[config_name] = self._load(config_name)

    def strategy_config(self, **overrides) -> StrategyConfig:
        """Build the StrategyConfig from strategy.json plus keyword overrides."""
        values = dict(self.get_config('strategy'))
        values.update(overrides)
        return StrategyConfig.from_dict(values)


# Global configuration loader instance
config_loader = ConfigLoader()
