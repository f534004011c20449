"""Encodage des données transmises entre processus.

Une valeur structurée (liste, dict, structures imbriquées, ...) ne
peut pas traverser telle quelle un argument de commande ou un pipe.
encode() la sérialise puis l'encode en base64 : le texte obtenu ne
contient que [A-Za-z0-9+/=], sans caractère interprété par un shell.

Example:
    Côté parent :

        arg = Argument("--payload", "=", encode({"ids": [1, 2]}))

    Côté enfant (script Python) :

        payload = decode(sys.argv[1].split("=", 1)[1])
        sys.stdout.write(encode(traiter(payload)))

    Retour au parent :

        value = wrapper.result().decode_stdout()
"""

import base64
import binascii
import pickle  # nosec B403
from typing import Any, Union

from async_tools.errors.exceptions import CodecError

PICKLE_PROTOCOL = 4


def encode(data: Any) -> str:
    """Encode une donnée pour l'envoyer d'un processus à un autre.

    Args:
        data: Donnée quelconque sérialisable par pickle.

    Returns:
        Texte ASCII base64.

    Raises:
        CodecError: Si la donnée n'est pas sérialisable.
    """
    try:
        raw = pickle.dumps(data, protocol=PICKLE_PROTOCOL)
    except (pickle.PicklingError, TypeError, AttributeError) as e:
        raise CodecError(f"Donnée non encodable: {e}") from e
    return base64.b64encode(raw).decode("ascii")


def decode(data: Union[str, bytes]) -> Any:
    """Décode une donnée reçue d'un autre processus.

    Seules des données produites par encode() au sein de la même
    application doivent être décodées.

    Args:
        data: Texte produit par encode().

    Returns:
        La donnée d'origine.

    Raises:
        CodecError: Si le texte n'est pas un encodage valide.
    """
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CodecError(f"Base64 invalide: {e}") from e
    try:
        return pickle.loads(raw)  # nosec B301
    except Exception as e:
        raise CodecError(f"Donnée encodée invalide: {e}") from e
