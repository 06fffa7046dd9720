"""
Protected Option Payload Codec

The external order engine hands the adapter an opaque byte string. For a
protected option it is four 32-byte big-endian words:

    word 0  option_id           (bytes32)
    word 1  stop_loss_id        (bytes32)
    word 2  min_payoff          (uint256)
    word 3  enforce_stop_loss   (bool, 0 or 1)

Decoded payloads are external data, so they are validated with Pydantic.
"""

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from protected_options.core.errors import InvalidExtraDataError
from protected_options.core.identifiers import id_from_bytes, id_to_bytes

WORD_SIZE = 32
PAYLOAD_SIZE = 4 * WORD_SIZE
UINT256_LIMIT = 2**256


class ProtectedOptionData(BaseModel):
    """
    Reference from an external order to a protected option.

    Attributes:
        option_id: Valuation config to price against
        stop_loss_id: Stop-loss config gating the fill
        min_payoff: Smallest acceptable making amount
        enforce_stop_loss: Whether the stop-loss predicate must pass
    """

    model_config = ConfigDict(frozen=True)

    option_id: str
    stop_loss_id: str
    min_payoff: int = Field(ge=0, lt=UINT256_LIMIT)
    enforce_stop_loss: bool

    @field_validator("option_id", "stop_loss_id")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        id_to_bytes(v)
        return v.lower()


def encode_payload(
    option_id: str, stop_loss_id: str, min_payoff: int, enforce_stop_loss: bool
) -> bytes:
    """
    Serialize a payload reference.

    Raises:
        InvalidExtraDataError: If an identifier is not 32 bytes or min_payoff
            does not fit in a uint256
    """
    try:
        data = ProtectedOptionData(
            option_id=option_id,
            stop_loss_id=stop_loss_id,
            min_payoff=min_payoff,
            enforce_stop_loss=enforce_stop_loss,
        )
    except ValidationError as e:
        raise InvalidExtraDataError(f"Cannot encode payload: {e}") from e

    return b"".join(
        [
            id_to_bytes(data.option_id),
            id_to_bytes(data.stop_loss_id),
            data.min_payoff.to_bytes(WORD_SIZE, "big"),
            int(data.enforce_stop_loss).to_bytes(WORD_SIZE, "big"),
        ]
    )


def decode_payload(extra_data: bytes) -> ProtectedOptionData:
    """
    Parse a payload produced by encode_payload().

    Raises:
        InvalidExtraDataError: If the payload is empty, has the wrong length,
            or its flag word is not a boolean
    """
    if not extra_data:
        raise InvalidExtraDataError("Extra data is empty")
    if len(extra_data) != PAYLOAD_SIZE:
        raise InvalidExtraDataError(
            f"Extra data must be {PAYLOAD_SIZE} bytes, got {len(extra_data)}"
        )

    words = [extra_data[i : i + WORD_SIZE] for i in range(0, PAYLOAD_SIZE, WORD_SIZE)]
    flag = int.from_bytes(words[3], "big")
    if flag not in (0, 1):
        raise InvalidExtraDataError(f"Stop-loss flag word must be 0 or 1, got {flag}")

    return ProtectedOptionData(
        option_id=id_from_bytes(words[0]),
        stop_loss_id=id_from_bytes(words[1]),
        min_payoff=int.from_bytes(words[2], "big"),
        enforce_stop_loss=bool(flag),
    )
