"""Erreurs du traitement des rapports mensuels.

Seules les erreurs qui empêchent de traiter un document entier sont
représentées ici ; une valeur absente du texte n'est jamais une erreur.
"""


class OndError(Exception):
    """Erreur de traitement d'un rapport, propre à un document."""


class FilenameFormatError(OndError):
    """Le nom de fichier ne suit aucune des conventions reconnues."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"Format de nom de fichier non reconnu : {filename}")


class MonthNotRecognizedError(OndError):
    """Le nom de fichier contient un mois qui ne correspond à aucune graphie connue."""

    def __init__(self, raw_mois: str):
        self.raw_mois = raw_mois
        super().__init__(f'Mois "{raw_mois}" non reconnu.')


class UnreadablePdfError(OndError):
    """Le texte du PDF ne peut pas être extrait (fichier corrompu ou non PDF)."""

    def __init__(self, filename: str | None = None, reason: str | None = None):
        self.filename = filename
        self.reason = reason
        msg = "Impossible de lire le PDF"
        if filename:
            msg += f" {filename}"
        if reason:
            msg += f" : {reason}"
        super().__init__(msg)
