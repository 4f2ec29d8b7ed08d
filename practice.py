"""Terminal practice run against a running trainer server.

  python practice.py --count 3 --target 20
  python practice.py --count random --target 30 --url http://localhost:3000

Enter shows the next word, ``f`` flags the current word for review and ``q``
stops. The session is committed once however the run ends, Ctrl-C included.
"""
import argparse
import logging
import sys

import requests

from client import HttpRecordSender, TrainerClient
from models import RANDOM_MODE
from recorder import SessionRecorder
from selector import RepeatAvoidingPicker, turkish_lower

logger = logging.getLogger(__name__)


def make_word_source(client, mode):
    """Return a zero-argument callable yielding the next word for ``mode``."""
    if mode == RANDOM_MODE:
        picker = RepeatAvoidingPicker(client.random_word, client.syllable_counts())
        return picker.next_word
    count = int(mode)
    return lambda: client.word_for_count(count)


def format_word(word):
    """Alternate upper/lower case on syllables so the boundaries stand out."""
    return " ".join(s.upper() if i % 2 == 0 else s for i, s in enumerate(word.split()))


def run_practice(client, mode, target_count, sender, input_fn=input, output=print):
    recorder = SessionRecorder(mode, target_count, sender)
    next_word = make_word_source(client, mode)
    try:
        while True:
            word = turkish_lower(next_word())
            recorder.show(word)
            done = recorder.shown_count - 1
            output(f"[{done}/{target_count}]  {format_word(word)}")
            if done >= target_count:
                output("Tamamlandı!")
                break
            command = input_fn("").strip().lower()
            # flagging keeps the current word on screen
            while command == "f":
                try:
                    client.flag_word(word)
                    output(f"'{word}' kontrol listesine eklendi")
                except requests.RequestException as exc:
                    logger.error("Could not flag %r: %s", word, exc)
                command = input_fn("").strip().lower()
            if command == "q":
                break
    except (KeyboardInterrupt, EOFError):
        output("")
    finally:
        recorder.commit()
    return recorder


def main(argv=None, client=None):
    parser = argparse.ArgumentParser(description="Practice Turkish words by syllable count")
    parser.add_argument("--url", default="http://localhost:3000", help="trainer server base URL")
    parser.add_argument("--count", default=RANDOM_MODE,
                        help="syllable count to practice, or 'random'")
    parser.add_argument("--target", type=int, required=True, help="number of words to practice")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    if args.target <= 0:
        parser.error("--target must be a positive number")
    if args.count != RANDOM_MODE and (not args.count.isdigit() or int(args.count) < 1):
        parser.error("--count must be a positive number or 'random'")

    client = client or TrainerClient(args.url)
    sender = HttpRecordSender(client)
    try:
        recorder = run_practice(client, args.count, args.target, sender)
    except requests.RequestException as exc:
        print(f"Server error: {exc}", file=sys.stderr)
        # the session may already be committed; let that send finish
        sender.flush()
        return 1
    sender.flush()
    print(f"Oturum {recorder.session_id}: {recorder.shown_count} kelime")
    return 0


if __name__ == "__main__":
    sys.exit(main())
