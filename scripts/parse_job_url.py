#!/usr/bin/env python3
"""
Job URL Parsing Script

Runs a job posting URL through the parsing pipeline and prints the result.

Usage:
    python scripts/parse_job_url.py URL [options]

Examples:
    python scripts/parse_job_url.py https://job-boards.greenhouse.io/acme/jobs/123
    python scripts/parse_job_url.py https://www.metacareers.com/jobs/123 --json
    python scripts/parse_job_url.py --status
"""

import argparse
import asyncio
import json
import sys

from jobparser.core.container import get_container, init_container, shutdown_container


def print_status(container) -> None:
    rendering = container.rendering_service
    status = rendering.status()
    print("=" * 60)
    print("RENDERING STATUS")
    print("=" * 60)
    print(f"Rendering available: {rendering.is_available()}")
    engines = rendering.describe_engines()
    print(f"Engines: {', '.join(engines) if engines else 'none'}")
    print(f"Active instances: {status.active_instances}/{status.max_concurrent_instances}")
    print(f"Queued requests: {status.queued_requests}")
    print(f"Available slots: {status.available_slots}")


def print_result(result) -> None:
    print("=" * 60)
    print(f"{'PARSED' if result.successful else 'FAILED'} ({result.source})")
    print("=" * 60)
    if not result.successful:
        print(f"Error: {result.error_message}")
        return

    fields = [
        ("Title", result.job_title),
        ("Company", result.company),
        ("Location", result.location),
        ("Experience", result.experience_level.value if result.experience_level else None),
    ]
    if result.compensation is not None:
        fields.append(("Compensation", f"{result.compensation:,.2f} ({result.compensation_type.value})"))
    for label, value in fields:
        print(f"{label + ':':<14}{value or '-'}")

    if result.description:
        preview = result.description[:300]
        print(f"\n{preview}{'...' if len(result.description) > 300 else ''}")


async def main():
    """Main function to parse a job URL."""

    parser = argparse.ArgumentParser(description="Parse a job posting URL")
    parser.add_argument("url", nargs="?", help="Job posting URL")
    parser.add_argument("--status", action="store_true", help="Print rendering availability and queue status")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")

    args = parser.parse_args()
    if not args.url and not args.status:
        parser.error("a URL is required unless --status is given")

    await init_container()
    container = get_container()
    try:
        if args.status:
            print_status(container)

        if not args.url:
            return 0

        result = await container.job_parsing_service.parse_job_url(args.url)
        if args.json:
            print(json.dumps(result.to_dict(), indent=2))
        else:
            print_result(result)
        return 0 if result.successful else 1
    finally:
        await shutdown_container()


if __name__ == "__main__":
    try:
        exit_code = asyncio.run(main())
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nParsing interrupted")
        sys.exit(130)
