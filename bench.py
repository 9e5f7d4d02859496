"""Benchmark CoreBPE encode/decode against tiktoken on a slice of the Sci-Fi Gutenberg dataset.

Outputs a row with the columns:
  Corpus Size | Encoding | Encode Throughput | tiktoken Throughput |
  Decode Throughput | Compression Ratio | Mismatches
"""

import argparse
import logging
import time

import tiktoken
from datasets import load_dataset

from tokcore import from_tiktoken

HF_DATASET = "stevez80/Sci-Fi-Books-gutenberg"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%H:%M:%S",
)


def load_corpus(num_docs: int | None) -> list[str]:
    """Load up to `num_docs` documents via dataset indexing; full dataset when None."""
    print(f"Loading {HF_DATASET} (non-streaming) …")
    ds = load_dataset(HF_DATASET, split="train")
    if num_docs is not None:
        return ds[:num_docs]["text"]
    return ds["text"]


def main() -> None:
    """Run the encode/decode benchmark and print a markdown table row."""
    parser = argparse.ArgumentParser(
        description="Benchmark tokcore CoreBPE against tiktoken."
    )
    parser.add_argument(
        "--num-docs",
        type=int,
        default=100,
        help="Number of documents to encode (default: 100).",
    )
    parser.add_argument(
        "--encoding",
        type=str,
        default="cl100k_base",
        help="tiktoken encoding providing the vocabulary (default: cl100k_base).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads for batch encoding (default: TOKCORE_NUM_WORKERS or CPU count).",
    )
    args = parser.parse_args()

    docs = load_corpus(args.num_docs)
    if not docs:
        raise RuntimeError("No documents loaded from dataset.")

    total_bytes = sum(len(d.encode("utf-8")) for d in docs)
    corpus_mb = total_bytes / (1024 * 1024)

    core = from_tiktoken(args.encoding)
    reference = tiktoken.get_encoding(args.encoding)

    # --- Encoding ---
    t0 = time.perf_counter()
    encoded = core.encode_batch(docs, recognize_special=False, num_workers=args.workers)
    encode_mbps = total_bytes / (time.perf_counter() - t0) / (1024 * 1024)

    t0 = time.perf_counter()
    expected = reference.encode_ordinary_batch(docs)
    reference_mbps = total_bytes / (time.perf_counter() - t0) / (1024 * 1024)

    mismatches = sum(1 for ours, theirs in zip(encoded, expected) if ours != theirs)

    # --- Decoding ---
    t0 = time.perf_counter()
    core.decode_batch(encoded)
    total_tokens = sum(len(seq) for seq in encoded)
    decode_mtps = total_tokens / (time.perf_counter() - t0) / 1_000_000

    compression_ratio = total_bytes / total_tokens

    # --- Output ---
    print()
    header = (
        f"| {'Corpus Size':12} | {'Encoding':12} | {'Encode Throughput':17} "
        f"| {'tiktoken Throughput':19} | {'Decode Throughput':19} "
        f"| {'Compression Ratio':17} | {'Mismatches':10} |"
    )
    sep = (
        f"| {'-' * 12} | {'-' * 12} | {'-' * 17} "
        f"| {'-' * 19} | {'-' * 19} "
        f"| {'-' * 17} | {'-' * 10} |"
    )
    row = (
        f"| {f'{corpus_mb:.2f} MB':12} | {args.encoding:12} | {f'{encode_mbps:.2f} MB/sec':17} "
        f"| {f'{reference_mbps:.2f} MB/sec':19} | {f'{decode_mtps:.1f}M tokens/sec':19} "
        f"| {f'{compression_ratio:.2f}x':17} | {mismatches:10} |"
    )
    print(header)
    print(sep)
    print(row)
    print()


if __name__ == "__main__":
    main()
