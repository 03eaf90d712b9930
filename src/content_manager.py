"""
Content Manager for PartyRooms

Handles loading and validation of the YAML file holding the word game's
prompt letter alphabet and default round categories.
"""

import yaml
from typing import Dict, List, Any
import logging

logger = logging.getLogger(__name__)


class ContentValidationError(Exception):
    """Raised when YAML content validation fails."""
    pass


class ContentManager:
    """Manages loading and validation of word game content from YAML files."""

    def __init__(self, yaml_file_path: str = "word_game.yaml"):
        """
        Initialize ContentManager with path to YAML file.

        Args:
            yaml_file_path: Path to the YAML file containing letters and categories
        """
        self.yaml_file_path = yaml_file_path
        self.letters: List[str] = []
        self.categories: List[str] = []
        self._loaded = False

    def load_from_yaml(self) -> None:
        """
        Load letters and categories from the YAML file.

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ContentValidationError: If YAML structure is invalid
            yaml.YAMLError: If YAML parsing fails
        """
        try:
            with open(self.yaml_file_path, 'r', encoding='utf-8') as file:
                data = yaml.safe_load(file)

            self.validate_yaml_structure(data)
            self.letters = [letter.strip() for letter in data['letters']]
            self.categories = [category.strip() for category in data['categories']]
            self._loaded = True
            logger.info(
                f"Loaded {len(self.letters)} letters and {len(self.categories)} categories "
                f"from {self.yaml_file_path}"
            )

        except FileNotFoundError:
            logger.error(f"YAML file not found: {self.yaml_file_path}")
            raise
        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error: {e}")
            raise
        except ContentValidationError as e:
            logger.error(f"Content validation error: {e}")
            raise

    def validate_yaml_structure(self, data: Any) -> None:
        """
        Validate the structure of loaded YAML data.

        Args:
            data: Parsed YAML data to validate

        Raises:
            ContentValidationError: If structure is invalid
        """
        if not isinstance(data, dict):
            raise ContentValidationError("YAML root must be a dictionary")

        for key in ('letters', 'categories'):
            if key not in data:
                raise ContentValidationError(f"YAML must contain '{key}' key")
            items = data[key]
            if not isinstance(items, list):
                raise ContentValidationError(f"'{key}' must be a list")
            if len(items) == 0:
                raise ContentValidationError(f"'{key}' list cannot be empty")
            for i, item in enumerate(items):
                if not isinstance(item, str) or not item.strip():
                    raise ContentValidationError(f"'{key}' item {i} must be a non-empty string")

        for i, letter in enumerate(data['letters']):
            if len(letter.strip()) != 1:
                raise ContentValidationError(f"Letter {i} must be a single character")

        letters = [letter.strip() for letter in data['letters']]
        if len(letters) != len(set(letters)):
            raise ContentValidationError("Duplicate letters found")

        categories = [category.strip() for category in data['categories']]
        if len(categories) != len(set(categories)):
            raise ContentValidationError("Duplicate categories found")

    def is_loaded(self) -> bool:
        """Check if content has been loaded."""
        return self._loaded

    def to_dict(self) -> Dict[str, List[str]]:
        return {'letters': list(self.letters), 'categories': list(self.categories)}
