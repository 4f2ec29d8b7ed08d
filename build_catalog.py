"""Bucket a syllabified word list into <n>_syllable.json catalog files.

  python build_catalog.py words.txt data/
"""
import json
import os
import re
import sys

import requests

from selector import syllable_count, turkish_lower

# ----------------------------
# CONFIG
# ----------------------------
# One syllabified word per line: "ka lem", "ka-lem" or "ka·lem".
# A path or an http(s) URL; override with the first command-line argument.
SOURCE = "words_syllabified.txt"
OUTPUT_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")
MAX_SYLLABLES = 8


# ----------------------------
# Read the raw list
# ----------------------------
def fetch_source(source):
    if source.startswith(("http://", "https://")):
        print(f"Downloading word list from {source}...")
        response = requests.get(source, timeout=30)
        response.raise_for_status()
        return response.text
    with open(source, "r", encoding="utf-8") as f:
        return f.read()


# ----------------------------
# Normalize syllable separators and spacing
# ----------------------------
def normalize_word(text):
    text = re.sub(r"[-·‧]", " ", text)
    text = re.sub(r"\s+", " ", text)
    return text.strip()


# ----------------------------
# Drop blanks, comments and duplicates (case-insensitive)
# ----------------------------
def clean_lines(raw):
    seen = set()
    words = []
    for line in raw.splitlines():
        if line.lstrip().startswith("#"):
            continue
        word = normalize_word(line)
        if not word:
            continue
        key = turkish_lower(word)
        if key in seen:
            continue
        seen.add(key)
        words.append(word)
    return words


# ----------------------------
# Group by syllable count
# ----------------------------
def bucket_words(words, max_syllables=MAX_SYLLABLES):
    buckets = {}
    for word in words:
        count = syllable_count(word)
        if count > max_syllables:
            continue
        buckets.setdefault(count, []).append(word)
    return buckets


def write_buckets(buckets, output_dir):
    os.makedirs(output_dir, exist_ok=True)
    written = []
    for count in sorted(buckets):
        path = os.path.join(output_dir, f"{count}_syllable.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(buckets[count], f, ensure_ascii=False, indent=2)
        written.append(path)
    return written


# ----------------------------
# Main
# ----------------------------
def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    source = argv[0] if argv else SOURCE
    output_dir = argv[1] if len(argv) > 1 else OUTPUT_DIR

    words = clean_lines(fetch_source(source))
    print(f"Total words after cleanup: {len(words)}")

    buckets = bucket_words(words)
    for count in sorted(buckets):
        print(f"  {count} syllable(s): {len(buckets[count])} words")

    for path in write_buckets(buckets, output_dir):
        print(f"Saved {path}")


if __name__ == "__main__":
    main()
