import argparse
import asyncio
import json
import time

from veritas.config.settings import Context, VeritasSettings, build_initial_context
from veritas.core.errors import VeritasError
from veritas.llm import build_client
from veritas.models.keys import LARGE_KEYS
from veritas.models.serde import to_json_file, to_jsonable
from veritas.service import run_verification
from veritas.utils.truncation import truncate_for_display


def print_summary(context: Context) -> None:
    print("\n" + "=" * 80)
    print("SUMMARY")
    print("=" * 80)

    name = context.get("file_name")
    if name:
        print(f"File:            {name}")

    bundle = context.get("evidence_bundle")
    if bundle is not None:
        print(f"Sampled frames:  {bundle.frame_count}")

    for warning in context.get("warnings", []):
        print(f"Warning:         {warning}")

    result = context.get("translated_result") or context.get("analysis_result")
    if result is not None:
        print(f"Verdict:         {result.status.value}")
        print(f"Trust score:     {result.trust_score}/100")
        print(f"Findings:        {len(result.findings)}")

    report = context.get("report_written")
    if report:
        print(f"Report:          {report}")

    total_time = context.get("processing_time_seconds")
    if total_time is not None:
        print(f"Total time:      {total_time:.2f}s")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="veritas", description="Media verification pipeline")
    parser.add_argument("path", help="Путь к файлу (изображение, видео, документ, аудио).")
    parser.add_argument("--language", default=None, help="Язык вердикта (код или название), по умолчанию из настроек.")
    parser.add_argument("--translate-to", default=None, help="Дополнительно перевести вердикт на этот язык.")
    parser.add_argument("--max-frames", type=int, default=None, help="Сколько кадров брать из большого видео.")
    parser.add_argument("--report", default=None, help="Сохранить PDF отчёт по этому пути.")
    parser.add_argument("--output", default=None, help="Сохранить вердикт JSON по этому пути.")
    parser.add_argument("--mime-type", default=None, help="MIME тип, если не угадывается по расширению.")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace, settings: VeritasSettings) -> Context:
    context = build_initial_context(
        settings=settings,
        input_path=args.path,
        mime_type=args.mime_type,
        language=args.language,
        target_language=args.translate_to,
        report_path=args.report,
    )
    client = build_client(settings.gemini_settings())
    try:
        return await run_verification(context, settings, client)
    finally:
        await client.aclose()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    overrides = {}
    if args.max_frames is not None:
        overrides["sampler_max_frames"] = args.max_frames
    settings = VeritasSettings(**overrides)

    print("Starting verification pipeline...")
    print("-" * 50)

    start = time.monotonic()
    try:
        context = asyncio.run(_run(args, settings))
        print("\nPipeline completed successfully!")
    except (VeritasError, OSError, ValueError) as exc:
        print(f"\nPipeline failed after {time.monotonic() - start:.2f}s: {type(exc).__name__}: {exc}")
        return 1

    print_summary(context)

    verdict = context.get("translated_result") or context["analysis_result"]
    if args.output:
        to_json_file(verdict, args.output)
        print(f"Verdict saved: {args.output}")

    print("\n" + "=" * 80)
    print("FULL RESULTS (JSON)")
    print("=" * 80)

    printable = {k: v for k, v in context.items() if k not in {key.value for key in LARGE_KEYS} and k != "cancel_token"}
    print(json.dumps(truncate_for_display(to_jsonable(printable)), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
