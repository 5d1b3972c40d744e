from dataclasses import replace

import pytest
from conftest import HOLDER, TOKEN, TRANSFER_TOPIC, address_topic

from txquery.core.errors import OutOfRangeError
from txquery.core.models import FieldDescriptor, Log, Receipt, Transaction
from txquery.encoding import CALL_BASE, HEADER_SIZE, QueryableField, compute_layout, encode, queryable_field


def test_encode_is_deterministic(burn_tx: Transaction, burn_receipt: Receipt) -> None:
    first = encode(burn_tx, burn_receipt)
    second = encode(burn_tx, burn_receipt)

    assert first.data == second.data
    assert first.layout == second.layout


def test_header_values(burn_tx: Transaction, burn_receipt: Receipt) -> None:
    buf = encode(burn_tx, burn_receipt)
    reader = buf.reader()

    assert HEADER_SIZE == CALL_BASE == 352
    assert reader.jump_to(QueryableField.VERSION.offset).read_uint() == 1
    assert reader.jump_to(QueryableField.TX_HASH.offset).read_word() == burn_tx.hash
    assert reader.jump_to(QueryableField.TX_FROM.offset).read_word() == address_topic(HOLDER)
    assert reader.jump_to(QueryableField.TX_TO.offset).read_word() == address_topic(TOKEN)
    assert reader.jump_to(QueryableField.TX_NONCE.offset).read_uint() == 7
    assert reader.jump_to(QueryableField.RX_STATUS.offset).read_uint() == 1
    assert reader.jump_to(QueryableField.RX_GAS_USED.offset).read_uint() == 34_000
    assert reader.jump_to(QueryableField.RX_BLOCK_NUMBER.offset).read_uint() == 1_234_567
    assert reader.jump_to(QueryableField.CALL_DATA_SIZE.offset).read_uint() == 36
    assert reader.jump_to(QueryableField.LOG_COUNT.offset).read_uint() == 1


def test_regions(burn_tx: Transaction, burn_receipt: Receipt) -> None:
    buf = encode(burn_tx, burn_receipt)
    layout = buf.layout
    log = burn_receipt.logs[0]

    # 36 bytes of call data padded to two words
    assert buf.data[CALL_BASE:CALL_BASE + 36] == burn_tx.data
    assert buf.data[CALL_BASE + 36:CALL_BASE + 64] == b"\x00" * 28
    assert layout.logs_base == CALL_BASE + 64

    entry = layout.logs[0]
    assert entry.address_offset == 416
    assert buf.data[entry.address_offset:entry.address_offset + 32] == address_topic(TOKEN)
    assert buf.data[entry.topic_offset(0):entry.topic_offset(0) + 32] == TRANSFER_TOPIC
    assert entry.data_offset == 416 + 32 * 4
    assert buf.data[entry.data_offset:entry.end] == log.data
    assert len(buf) == entry.end == layout.size


def test_static_offsets_do_not_depend_on_values(burn_tx: Transaction, burn_receipt: Receipt) -> None:
    other_tx = replace(burn_tx, sender=TOKEN, recipient=None, nonce=0)
    other_receipt = replace(burn_receipt, status=0)

    a = encode(burn_tx, burn_receipt)
    b = encode(other_tx, other_receipt)

    assert a.layout == b.layout
    for f in (QueryableField.RX_STATUS, QueryableField.TX_FROM, QueryableField.TX_TO):
        assert a.data[f.offset:f.offset + 32] != b.data[f.offset:f.offset + 32]
    assert b.data[QueryableField.TX_TO.offset:QueryableField.TX_TO.offset + 32] == b"\x00" * 32


def test_layout_depends_only_on_structure(burn_tx: Transaction) -> None:
    empty = Receipt(status=1)
    two_logs = Receipt(
        status=0,
        logs=(
            Log(address=TOKEN, topics=(TRANSFER_TOPIC,), data=b"\x01" * 33),
            Log(address=HOLDER, topics=(), data=b""),
        ),
    )

    assert compute_layout(burn_tx, empty).size == CALL_BASE + 64
    layout = compute_layout(burn_tx, two_logs)
    assert layout.logs[0].end == 416 + 64 + 64
    assert layout.logs[1].offset == layout.logs[0].end
    assert layout.logs[1].data_offset == layout.logs[1].offset + 32
    assert encode(burn_tx, two_logs).layout == layout


def test_contract_creation_without_call_data() -> None:
    tx = Transaction(hash=b"", sender=HOLDER, recipient=None)
    buf = encode(tx, Receipt(status=1))

    assert len(buf) == HEADER_SIZE
    assert buf.layout.logs_base == CALL_BASE


def test_reader_bounds(burn_tx: Transaction, burn_receipt: Receipt) -> None:
    reader = encode(burn_tx, burn_receipt).reader()

    reader.jump_to(len(reader))
    with pytest.raises(OutOfRangeError):
        reader.read_bytes(1)
    with pytest.raises(OutOfRangeError):
        reader.jump_to(len(reader) + 1)
    with pytest.raises(OutOfRangeError):
        reader.read_field(FieldDescriptor(len(reader) - 16, 32))


def test_queryable_field_names() -> None:
    assert queryable_field("status") is QueryableField.RX_STATUS
    assert queryable_field("Sender") is QueryableField.TX_FROM
    assert queryable_field("tx_value") is QueryableField.TX_VALUE
    with pytest.raises(ValueError, match="unknown static field"):
        queryable_field("balance")


def test_invalid_inputs() -> None:
    with pytest.raises(ValueError):
        encode(Transaction(hash=b"", sender="0x1234", recipient=None), Receipt(status=1))
    with pytest.raises(ValueError):
        Log(address=TOKEN, topics=(b"\x01",))
    with pytest.raises(ValueError):
        FieldDescriptor(0, 0)


def test_layout_disagreement_is_an_error(monkeypatch, burn_tx: Transaction, burn_receipt: Receipt) -> None:
    real = compute_layout(burn_tx, burn_receipt)
    monkeypatch.setattr(
        "txquery.encoding.encoder.compute_layout",
        lambda tx, rx: replace(real, logs_base=real.logs_base + 32, logs=()),
    )

    with pytest.raises(RuntimeError, match="layout expects"):
        encode(burn_tx, burn_receipt)
