"""Command line surface: flags, interactive prompts and directory bootstrap."""

import argparse
import sys
from typing import Callable, Optional

from ..config.settings import WatcherConfig
from ..models.channel import Channel
from ..services.channel_store import ChannelStore
from ..services.errors import ChannelLookupError, ChannelStoreError, ChannelValidationError
from ..services.video_source import YtDlpDataSource
from ..services.watcher_service import WatcherService

InputFn = Callable[[str], str]

HIGHLIGHT = "\x1b[93m"
RESET = "\x1b[0m"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="yt-notify",
        description="Watch YouTube channels and get notified about new uploads and livestreams."
    )
    parser.add_argument("-s", "--start-daemon", action="store_true",
                        help="Start polling saved channels (default when no flag is given)")
    parser.add_argument("-a", "--add-channel", action="store_true",
                        help="Add a channel interactively")
    parser.add_argument("-r", "--remove-channel", action="store_true",
                        help="Remove a channel (not implemented yet)")
    parser.add_argument("-e", "--edit-channel", action="store_true",
                        help="Edit a channel (not implemented yet)")
    parser.add_argument("-d", "--dump", action="store_true",
                        help="Print every saved channel record")
    parser.add_argument("--archive", action="store_true",
                        help="Only capture livestreams of archive-flagged channels")
    return parser


def prompt_string(prompt: str, input_fn: InputFn = input) -> str:
    print(prompt)
    sys.stdout.flush()
    return input_fn("").strip()


def split_keywords(text: str) -> list[str]:
    """Split a comma-separated answer into keywords, dropping blanks."""
    return [word.strip() for word in text.split(",") if word.strip()]


def prompt_channel(store: ChannelStore, input_fn: InputFn = input) -> Channel:
    """Ask the user about a channel, then validate and resolve it."""
    name = prompt_string("Enter the nickname of the channel you'd like to add:", input_fn)
    url = prompt_string("Enter the URL of the channel you'd like to add:", input_fn)
    keywords = split_keywords(prompt_string(
        "Enter a comma-separated list of words you'd like to receive notifications for. "
        "Leave blank if you would like to receive everything.", input_fn))

    answer = prompt_string("Would you like to archive livestreams from this channel? [y/N]", input_fn)
    archive = answer.lower() in ("y", "yes")
    archive_keywords = None
    if archive:
        archive_keywords = split_keywords(prompt_string(
            "Enter a comma-separated list of keywords you'd like to archive streams with. "
            "Leave blank if you would like to archive everything.", input_fn))

    print(f"Verifying and saving channel \"{name}\"...")
    return store.create(name, url, keywords, archive, archive_keywords)


def add_channel(store: ChannelStore, input_fn: InputFn = input) -> bool:
    try:
        channel = prompt_channel(store, input_fn)
    except ChannelValidationError as e:
        print(f"[cli] Could not verify that channel. Is the URL correct? ({e})")
        return False
    except ChannelLookupError as e:
        print(f"[cli] Could not verify that channel. {e}")
        return False

    try:
        store.save(channel)
    except ChannelStoreError as e:
        print(f"[cli] Could not write channel to file. Do you have permission? ({e})")
        return False

    print(f"Added {channel.name} successfully.")
    return True


def dump_entries(store: ChannelStore) -> None:
    for path in store.list_saved():
        try:
            channel = store.load(path)
        except ChannelStoreError as e:
            print(f"[cli] {e}")
            continue
        print(channel)


def bootstrap_store(config: WatcherConfig) -> ChannelStore:
    """Create the store directories or exit the process."""
    store = ChannelStore(config.home_dir, YtDlpDataSource(config.ytdlp_binary, config.lookup_timeout))
    try:
        store.ensure_dirs()
    except ChannelStoreError as e:
        print(f"FATAL: {e}")
        sys.exit(1)
    return store


def run(argv: Optional[list[str]], config: WatcherConfig, input_fn: InputFn = input) -> None:
    """Execute the commands selected on the command line, in a fixed order."""
    args = build_parser().parse_args(argv)
    store = bootstrap_store(config)

    one_shot = args.add_channel or args.remove_channel or args.edit_channel or args.dump
    start_daemon = args.start_daemon or not (one_shot or args.archive)

    if args.add_channel:
        add_channel(store, input_fn)

    if args.remove_channel:
        channel_id = prompt_string(
            f"Enter the {HIGHLIGHT}ID{RESET} of the channel you would like to remove:", input_fn)
        print(f"Eventually, I will remove the channel with id {channel_id}")

    if args.edit_channel:
        channel_id = prompt_string(
            f"Enter the {HIGHLIGHT}ID{RESET} of the channel you would like to edit:", input_fn)
        print(f"Eventually, I will edit the channel with id {channel_id}")

    if args.dump:
        dump_entries(store)

    if args.archive:
        WatcherService(config, store=store).run_archive()
    elif start_daemon:
        print("Starting daemon...")
        WatcherService(config, store=store).start()
