"""Localized user-facing messages."""

from glucose_log.domain.entry import Language

MESSAGES: dict[Language, dict[str, str]] = {
    Language.DANISH: {
        "no_data": "Ingen data endnu. Tilføj din første måling.",
        "import_success": "Data importeret succesfuldt!",
        "import_error": "Fejl ved import af data. Sørg for at filen er i det korrekte format.",
        "assistant_no_response": "Kunne ikke generere et svar.",
        "assistant_error": "Der opstod en fejl i forbindelsen til AI assistenten.",
        "average": "Gennemsnit",
        "highest": "Højeste",
        "lowest": "Laveste",
    },
    Language.ENGLISH: {
        "no_data": "No data yet. Add your first measurement.",
        "import_success": "Data imported successfully!",
        "import_error": "Error importing data. Please ensure the file is in the correct format.",
        "assistant_no_response": "Could not generate a response.",
        "assistant_error": "An error occurred connecting to the AI assistant.",
        "average": "Average",
        "highest": "Highest",
        "lowest": "Lowest",
    },
}


def message(language: Language, key: str) -> str:
    """Look up a localized message."""
    return MESSAGES[Language(language)][key]
