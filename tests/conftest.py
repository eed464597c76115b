import stat
import sys
from pathlib import Path

import pytest

from zingo_bridge.models import WalletIdentity

TRANSACTIONS_OUTPUT = """Launching sync task...
{
  txid: abc123
  datetime: 2024-05-01 10:00:00
  blockheight: 2500000
  kind: sent
  value: 150000
  outgoing_tx_data:
  {
    recipient_address: u1aaa
    value: 100000
    memo: first
  }
  outgoing_tx_data:
  {
    recipient_address: u1bbb
    value: 50000
  }
}
{
  txid: def456
  kind: received
  value: 2000
  orchard_notes:
  {
    value: 2000
    spend_status: unspent
  }
}
Save task shutdown successfully.
"""

FAKE_ZINGO = r'''
import json
import os
import sys
import time

TRANSACTIONS = %(transactions)r

options = {}
positional = []
args = sys.argv[1:]
index = 0
while index < len(args):
    if args[index].startswith("--"):
        options[args[index][2:]] = args[index + 1]
        index += 2
    else:
        positional.append(args[index])
        index += 1


def emit(text):
    sys.stdout.write(text)
    sys.stdout.flush()


def oneshot(command, rest):
    if command == "balance":
        emit(
            "Launching sync task...\n[\n"
            "confirmed_orchard_balance: 190_000\n"
            "confirmed_sapling_balance: 1_250\n"
            "Zingo CLI 1.0\n]\n"
            "Save task shutdown successfully.\n"
        )
    elif command == "transactions":
        emit(TRANSACTIONS)
    elif command == "addresses":
        emit('Launching\n[\n  {\n    "account": 0,\n    "encoded_address": "u1abc"\n  }\n]\n')
    elif command == "parse_address":
        emit("\x1b[1m" + json.dumps({"status": "success", "chain_name": options["chain"], "address": rest[0]}) + "\x1b[0m\n")
    elif command == "quicksend":
        payments = json.loads(rest[0])
        emit(json.dumps({"payments": payments}) + "\n" + json.dumps({"txids": ["abc"]}) + "\n")
    elif command == "args":
        emit(json.dumps({"options": options, "positional": positional}) + "\n")
    elif command == "fail":
        sys.stderr.write("wallet is locked\n")
        sys.exit(2)
    elif command == "hang":
        time.sleep(30)
    else:
        sys.stderr.write("unknown command\n")
        sys.exit(1)


def repl():
    emit("Zingo CLI 1.0 ready\n")
    while True:
        line = sys.stdin.readline()
        if not line:
            break
        command = line.strip()
        if command == "sync status":
            emit("\x1b[32m{ sync_id: 7, in_progress: false, scanned_blocks: 1_000, }\x1b[0m\n")
        elif command == "info":
            emit(json.dumps({"pid": os.getpid(), "chain": options["chain"], "server": options["server"], "data_dir": options["data-dir"]}, indent=2) + "\n")
        elif command == "notes":
            emit("{\n  value: 2000\n  spend_status: unspent\n}\n")
        elif command == "slow":
            time.sleep(0.6)
            emit('{"slow": true}\n')
        elif command == "split":
            emit('{ "part":')
            time.sleep(0.2)
            emit(" 1 }\n")
        elif command == "silent":
            pass
        elif command == "crash":
            sys.stderr.write("panic: database locked\n")
            sys.stderr.flush()
            sys.exit(3)
        elif command == "quit":
            break
        else:
            emit(json.dumps({"echo": command}) + "\n")


if positional:
    oneshot(positional[0], positional[1:])
else:
    repl()
'''


@pytest.fixture()
def fake_zingo(tmp_path: Path) -> str:
    script = tmp_path / "zingo-cli"
    script.write_text(
        f"#!{sys.executable}\n" + FAKE_ZINGO % {"transactions": TRANSACTIONS_OUTPUT},
        encoding="utf-8",
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(script)


@pytest.fixture()
def identity(tmp_path: Path) -> WalletIdentity:
    data_dir = tmp_path / "wallets" / "owner-1" / "Main" / "testnet"
    data_dir.mkdir(parents=True)
    return WalletIdentity(
        chain="testnet",
        server_url="https://testnet.zec.rocks:443",
        data_dir=str(data_dir),
    )
