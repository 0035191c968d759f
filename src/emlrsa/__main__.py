"""The Command Line Interface for the utility, including Interactive elements.

A hybrid CLI/ICLI that prompts for whatever the command line left out, unless running non-interactively, in which
case missing arguments fall back to their defaults or fail.

Typical usage example:

    emlrsa keygen -p alice.pub -P alice --bits 256
    emlrsa encrypt -p alice.pub --message P:letter.txt --output letter.enc
    python -m emlrsa decrypt -P alice --ciphertext P:letter.enc
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import logging
import pathlib
import sys
import typing

import emlrsa
from emlrsa import keygen as kg
from emlrsa import streams


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Type = str
    choices: list[str] | None = None
    default: typing.Any = None
    advanced: bool = False


help_dict: dict[str, HelpData] = {
    "subcommand":
        HelpData(
            description="The available subcommands in EML RSA.",
            choices=["keygen", "encrypt", "decrypt"],
        ),
    "keygen":
        HelpData("Key generation utility."),
    "encrypt":
        HelpData("Encryption utility."),
    "decrypt":
        HelpData("Decryption utility."),
    "public_key":
        HelpData(
            description="Location of the public key file.",
            format=pathlib.Path,
        ),
    "private_key":
        HelpData(
            description="Location of the private key file.",
            format=pathlib.Path,
        ),
    "message":
        HelpData(
            description="Message or path to file containing payload. If Path start with `P:`",
            format=str,
        ),
    "ciphertext":
        HelpData(
            description="Ciphertext units or path to file containing them. If Path start with `P:`",
            format=str,
        ),
    "output":
        HelpData(
            description="File to write the result to. Leave empty to print it.",
            format=str,
            default="",
        ),
    "encoding":
        HelpData(description="Payload encoding.", choices=["utf-8", "utf-16", "ascii"], advanced=True, default="utf-8"),
    "bits":
        HelpData(
            description="Bit width of each secret prime.",
            format=int,
            default=kg.DEFAULT_BITS,
        ),
    "seed":
        HelpData(
            description="Explicit seed for reproducible keys. Leave empty for a secure random source.",
            format=str,
            advanced=True,
            default="",
        ),
    "key_format":
        HelpData(description="Key file format.", choices=["text", "pem"], advanced=True, default="text"),
    "workers":
        HelpData(
            description="Number of worker threads for the per-byte transform.",
            format=int,
            advanced=True,
            default=1,
        ),
    "overwrite":
        HelpData(
            description="Overwrite specified destination files if they exist?",
            choices=["Y", "N"],
            default="N",
        )
}

needs = {
    "keygen": ("public_key", "private_key", "bits", "seed", "key_format"),
    "encrypt": ("public_key", "message", "output", "encoding", "workers"),
    "decrypt": ("private_key", "ciphertext", "output", "encoding", "workers"),
}

pubkey = argparse.ArgumentParser(add_help=False)
pubkey.add_argument("--public_key", "-p", type=help_dict["public_key"].format, help=help_dict["public_key"].description)
privkey = argparse.ArgumentParser(add_help=False)
privkey.add_argument("--private_key",
                     "-P",
                     type=help_dict["private_key"].format,
                     help=help_dict["private_key"].description)
outp = argparse.ArgumentParser(add_help=False)
outp.add_argument("--output", "-o", type=help_dict["output"].format, help=help_dict["output"].description)
encp = argparse.ArgumentParser(add_help=False)
encp.add_argument("--encoding", "-e", choices=help_dict["encoding"].choices, help=help_dict["encoding"].description)
workp = argparse.ArgumentParser(add_help=False)
workp.add_argument("--workers", "-w", type=help_dict["workers"].format, help=help_dict["workers"].description)
corep = argparse.ArgumentParser(prog="emlrsa")
corep.add_argument("--version", "-v", action="version", version=f"%(prog)s {emlrsa.__version__}")
corep.add_argument("--non-interactive", "-n", action="store_true", help="Enable non-interactive mode")
corep.add_argument("--advanced", "-a", action="store_true", help="Enable advanced mode, for interactive mode")
corep.add_argument("--verbose", "-V", action="store_true", help="Log progress to stderr")
commands = corep.add_subparsers(dest="subcommand", title="Subcommands")

keygen = commands.add_parser("keygen", parents=[privkey, pubkey], help=help_dict["keygen"].description)
keygen.add_argument("--bits", "-b", type=help_dict["bits"].format, help=help_dict["bits"].description)
keygen.add_argument("--seed", "-s", type=help_dict["seed"].format, help=help_dict["seed"].description)
keygen.add_argument("--key-format",
                    "-f",
                    dest="key_format",
                    choices=help_dict["key_format"].choices,
                    help=help_dict["key_format"].description)
keygen.add_argument("--overwrite", "-O", action="store_const", const="Y", help=help_dict["overwrite"].description)

encrypt = commands.add_parser("encrypt", parents=[pubkey, outp, encp, workp], help=help_dict["encrypt"].description)
encrypt.add_argument("--message", "-m", type=help_dict["message"].format, help=help_dict["message"].description)
decrypt = commands.add_parser("decrypt", parents=[privkey, outp, encp, workp], help=help_dict["decrypt"].description)
decrypt.add_argument("--ciphertext",
                     "-c",
                     type=help_dict["ciphertext"].format,
                     help=help_dict["ciphertext"].description)


def fallback(arg: str, non_interactive: bool, advanced: bool) -> typing.Any:
    """The value an argument takes without asking, or `None` when the user has to be asked.

    Advanced arguments fall back to their default unless advanced mode is on. In non-interactive mode every
    argument falls back, and one without a default is an error.

    Raises:
        IOError: If the argument has no default and prompting is disabled.
    """
    data = help_dict[arg]
    if data.default is not None and (non_interactive or (data.advanced and not advanced)):
        return data.default
    if non_interactive:
        raise IOError(f"Argument {arg} is missing and non-interactive mode is active.")
    return None


def convert(arg: str, answer: str) -> typing.Any:
    """Turn a typed answer into the value of `arg`. An empty answer selects the default.

    Raises:
        ValueError: With a message for the user, if the answer is not acceptable.
    """
    data = help_dict[arg]
    if not answer:
        if data.default is None:
            raise ValueError("Please provide a value.")
        return data.default
    if data.choices is not None:
        if answer not in data.choices:
            raise ValueError("Please select an option from the list.")
        return answer
    try:
        return data.format(answer)
    except ValueError as exc:
        raise ValueError(f"We could not convert your value to {data.format.__name__}.") from exc


def describe(arg: str, prntr: typing.Callable) -> None:
    data = help_dict[arg]
    prntr(f"Please specify the {arg}!")
    prntr("Description: " + data.description)
    for choice in data.choices or ():
        suffix = " (Default)" if choice == data.default else ""
        sub = help_dict.get(choice)
        prntr(f"{choice} - {sub.description}{suffix}" if sub else f"{choice}{suffix}")
    if data.default is not None:
        if data.choices is None:
            prntr(f"Default value: {data.default}")
        prntr("To accept default just click enter. Otherwise specify value.")


def ask(arg: str, args: argparse.Namespace, prntr: typing.Callable = print) -> typing.Any:
    """Resolve a missing argument, prompting until the answer converts."""
    value = fallback(arg, args.non_interactive, args.advanced)
    if value is not None:
        return value
    describe(arg, prntr)
    while True:
        try:
            return convert(arg, input(f"{arg}: "))
        except ValueError as exc:
            prntr(str(exc))


def complete(args: argparse.Namespace, prntr: typing.Callable) -> None:
    """Fill in every argument the chosen subcommand needs."""
    if not args.subcommand:
        args.subcommand = ask("subcommand", args, prntr)
    for name in needs[args.subcommand]:
        value = getattr(args, name, None)
        if value is None:
            setattr(args, name, ask(name, args, prntr))
        else:
            prntr(f"{name}: {value}")


def keys_writable(args: argparse.Namespace, prntr: typing.Callable) -> bool:
    """Whether keygen may write its destinations, asking before replacing existing files."""
    if not (args.private_key.exists() or args.public_key.exists()):
        return True
    return (getattr(args, "overwrite", None) or ask("overwrite", args, prntr)) == "Y"


def check_message(mess: str, enc: str) -> bytearray:
    """Parse message for path-notice, reading the file verbatim if present."""
    if mess.startswith("P:"):
        return streams.read_bytes(mess[2:])
    return bytearray(mess.encode(enc))


def run(args: argparse.Namespace, pspr: typing.Callable) -> None:
    """Execute a fully specified subcommand."""
    match args.subcommand:
        case "keygen":
            gen = kg.KeyGenerator(args.bits, emlrsa.SeededRandom(args.seed) if args.seed else emlrsa.SecureRandom())
            gen.run()
            gen.persist(args.public_key, args.private_key, args.key_format)
            pspr("\nKey pair generated!")
        case "encrypt":
            message = check_message(args.message, args.encoding)
            with emlrsa.load_key(args.public_key) as pub:
                units = emlrsa.encrypt(message, pub, args.workers)
            if args.output:
                streams.write_integers(args.output, units)
            else:
                pspr("Ciphertext:")
                print(emlrsa.format_ciphertext(units))
        case "decrypt":
            if args.ciphertext.startswith("P:"):
                units = streams.read_integers(args.ciphertext[2:])
            else:
                units = emlrsa.parse_ciphertext(args.ciphertext)
            with emlrsa.load_key(args.private_key, private=True) as priv:
                clear = emlrsa.decrypt(units, priv, args.workers)
            if args.output:
                streams.write_bytes(args.output, clear)
            else:
                pspr("Cleartext:")
                print(clear.decode(args.encoding, errors="replace"))


def main(argv: list[str] | None = None):
    """Core Hybrid CLI/ICLI (Command Line Interface/Interactive Command Line Interface)"""
    args = corep.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    def pspr(text: str):
        """Print only if not in non-interactive mode."""
        if not args.non_interactive:
            print(text)

    pspr("Welcome to EML RSA!\n")
    try:
        complete(args, pspr)
        if args.subcommand == "keygen" and not keys_writable(args, pspr):
            print("Destination private or public key already exists!")
            return
        pspr("\nInput Complete! Executing...")
        run(args, pspr)
    except (emlrsa.EMLRSAError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    pspr("Thank you for using EML RSA!")
    pspr("Goodbye!")


if __name__ == "__main__":
    main()
