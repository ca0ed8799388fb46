"""Base class for sensitive value validators"""
from abc import ABC, abstractmethod
from typing import List, Tuple


class SensitiveDataValidator(ABC):
    """Abstract base class for sensitive value validators.

    A validator answers two questions about one kind of sensitive value:
    whether a whole value is well-formed (used by payload validation rules)
    and where such values occur inside free text (used for redaction).
    """

    def __init__(self, name: str):
        """Initialize validator with the rule type it backs"""
        self.name = name

    @abstractmethod
    def is_valid(self, value: str) -> bool:
        """
        Check whether the whole value is a well-formed instance.

        Args:
            value: The candidate value

        Returns:
            True if the value passes the format check
        """
        pass

    @abstractmethod
    def find_matches(self, text: str) -> List[Tuple[str, int, int]]:
        """
        Find all occurrences of this kind of value in free text.

        Returns:
            List of tuples containing (matched_text, start_position, end_position)
        """
        pass

    def contains_sensitive_data(self, text: str) -> bool:
        return len(self.find_matches(text)) > 0

    def mask_sensitive_data(self, text: str, mask_char: str = '*') -> str:
        """
        Mask every match in the text.

        Args:
            text: The text containing sensitive data
            mask_char: Character to use for masking

        Returns:
            Text with matches masked, keeping two characters at each end
        """
        matches = self.find_matches(text)
        if not matches:
            return text

        # Replace from the end so earlier offsets stay valid
        matches.sort(key=lambda x: x[1], reverse=True)

        result = text
        for matched_text, start, end in matches:
            if len(matched_text) > 4:
                masked = matched_text[:2] + mask_char * (len(matched_text) - 4) + matched_text[-2:]
            else:
                masked = mask_char * len(matched_text)
            result = result[:start] + masked + result[end:]

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"
