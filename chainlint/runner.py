"""
CLI runner for the chainlint tree-sitter engine.

This module provides the main CLI entry point for loading adapters,
parsing files, running rules, and outputting results.
"""

import argparse
import concurrent.futures
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import List, Dict, Any, Tuple, Optional

from .config import EngineConfig, find_config_file, load_config
from .file_filter import should_analyze_file
from .registry import (discover_rules, get_adapter, get_all_rules, get_enabled_rules,
                       load_default_adapters)
from .schema import ENGINE_VERSION, PROTOCOL_VERSION, findings_to_json, validate_runner_output
from .suppressions import filter_suppressed_findings
from .types import Finding, RuleContext

logger = logging.getLogger(__name__)

LANGUAGES = ["typescript", "javascript"]

EXIT_CLEAN = 0
EXIT_FINDINGS = 1
EXIT_USAGE = 2

_SEVERITY_ORDER = {"info": 0, "warn": 1, "warning": 1, "error": 2}


def collect_files(paths: List[str], language: str) -> List[str]:
    """Collect files to analyze for ``language``.

    Vendor and generated directories (node_modules, dist, etc.) are skipped
    using the file_filter module.
    """
    adapter = get_adapter(language)
    if not adapter:
        logger.error("No adapter found for language '%s'", language)
        return []

    for path in paths:
        if not os.path.exists(path):
            logger.warning("Path '%s' does not exist", path)

    files = []
    for file_path in adapter.list_files(paths):
        abs_path = str(Path(file_path).absolute())
        if should_analyze_file(abs_path, language):
            files.append(abs_path)

    return sorted(set(files))  # Remove duplicates and sort


def _passes_threshold(finding: Finding, threshold: str) -> bool:
    return _SEVERITY_ORDER.get(finding.severity, 1) >= _SEVERITY_ORDER.get(threshold, 0)


def analyze_file(file_path: str, language: str, rules: List, config: EngineConfig,
                 content: Optional[str] = None) -> Tuple[List[Finding], float]:
    """Analyze a single file and return findings and parse time.

    Args:
        file_path: Path to the file (used for context even if content is provided)
        language: Language to analyze
        rules: List of rules to run
        config: Engine configuration
        content: Optional file content (if None, reads from disk)
    """
    adapter = get_adapter(language)
    if not adapter:
        return [], 0.0

    try:
        if content is None:
            with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
                content = f.read()
    except OSError as e:
        logger.warning("Failed to read %s: %s", file_path, e)
        return [], 0.0

    # file_path selects TSX vs TS grammar
    parse_start = time.time()
    tree = adapter.parse(content, file_path=file_path)
    parse_time = (time.time() - parse_start) * 1000
    if tree is None:
        logger.warning("No parser available for %s, skipping", file_path)
        return [], parse_time

    context = RuleContext(
        file_path=file_path,
        text=content,
        tree=tree,
        adapter=adapter,
        config=config.config_for(language, [rule.meta.id for rule in rules])
    )

    findings = []
    for rule in rules:
        rule_id = getattr(rule.meta, 'id', 'unknown')
        try:
            rule_findings = list(rule.visit(context))
        except Exception as e:
            logger.warning("Rule '%s' failed on %s: %s", rule_id, file_path, e)
            continue

        for finding in rule_findings:
            # Apply severity overrides from config
            if config.rule_severities and finding.rule in config.rule_severities:
                finding = finding._replace(severity=config.rule_severities[finding.rule])
            if _passes_threshold(finding, config.severity_threshold):
                findings.append(finding)

        # Apply per-file limit
        if len(findings) >= config.max_findings_per_file:
            findings = findings[:config.max_findings_per_file]
            break

    findings = filter_suppressed_findings(findings, content)
    return findings, parse_time


def run_analysis_parallel(files: List[str], language: str, rules: List, config: EngineConfig,
                          jobs: int) -> Tuple[List[Finding], float]:
    """Run analysis on files, in a thread pool when ``jobs`` > 1."""
    results: Dict[str, Tuple[List[Finding], float]] = {}

    if jobs <= 1:
        for file_path in files:
            results[file_path] = analyze_file(file_path, language, rules, config)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=jobs) as executor:
            futures = {
                executor.submit(analyze_file, file_path, language, rules, config): file_path
                for file_path in files
            }
            for future in concurrent.futures.as_completed(futures):
                file_path = futures[future]
                try:
                    results[file_path] = future.result()
                except Exception as e:
                    logger.warning("Failed to process %s: %s", file_path, e)
                    results[file_path] = ([], 0.0)

    # Results are ordered by file path regardless of completion order
    all_findings = []
    total_parse_time = 0.0
    for file_path in sorted(results):
        findings, parse_time = results[file_path]
        all_findings.extend(findings)
        total_parse_time += parse_time

    return all_findings, total_parse_time


def analyze_paths(paths: List[str], language: str = "auto", rule_patterns: List[str] = None,
                  config: Optional[EngineConfig] = None,
                  jobs: int = 1) -> Tuple[List[Finding], int, int, Dict[str, float]]:
    """
    Library function to analyze paths.

    Args:
        paths: List of file/directory paths to analyze
        language: "typescript", "javascript" or "auto" for both
        rule_patterns: Rule patterns to run (default: config.enabled_rules)
        config: Engine configuration (default: auto-detected config file)
        jobs: Number of worker threads

    Returns:
        (findings, files_scanned, rules_run, metrics)
    """
    total_start = time.time()
    load_default_adapters()
    discover_rules()

    if config is None:
        config = load_config(find_config_file(paths[0] if paths else "."))
    if rule_patterns is None:
        rule_patterns = config.enabled_rules

    languages = LANGUAGES if language == "auto" else [language]

    all_findings = []
    files_scanned = 0
    rule_ids = set()
    parse_ms = 0.0
    seen_files = set()

    for lang in languages:
        rules = get_enabled_rules(rule_patterns, lang)
        if not rules:
            continue

        files = [f for f in collect_files(paths, lang) if f not in seen_files]
        if not files:
            continue
        seen_files.update(files)

        files_scanned += len(files)
        rule_ids.update(rule.meta.id for rule in rules)
        findings, lang_parse_ms = run_analysis_parallel(files, lang, rules, config, jobs)
        parse_ms += lang_parse_ms
        all_findings.extend(findings)

    all_findings.sort(key=lambda f: (f.file, f.start_byte))

    # Apply total findings limit
    if len(all_findings) > config.max_total_findings:
        all_findings = all_findings[:config.max_total_findings]

    total_ms = (time.time() - total_start) * 1000
    metrics = {
        "parse_ms": parse_ms,
        "rules_ms": max(total_ms - parse_ms, 0.0),
        "total_ms": total_ms
    }
    return all_findings, files_scanned, len(rule_ids), metrics


def _read_texts(findings: List[Finding]) -> Dict[str, str]:
    text_cache = {}
    for file_path in {finding.file for finding in findings}:
        try:
            with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
                text_cache[str(Path(file_path).resolve())] = f.read()
        except OSError as e:
            logger.warning("Failed to read %s: %s", file_path, e)
    return text_cache


def format_output(findings: List[Finding], files_count: int, rules_count: int,
                  metrics: Dict[str, float], format_type: str,
                  text_cache: Dict[str, str] = None) -> str:
    """Format output according to specified format."""
    if text_cache is None:
        text_cache = _read_texts(findings)

    if format_type == "json":
        output = {
            "chainlint.protocol": PROTOCOL_VERSION,
            "engine_version": ENGINE_VERSION,
            "files_scanned": files_count,
            "rules_run": rules_count,
            "findings": findings_to_json(findings, text_cache),
            "metrics": metrics
        }
        return json.dumps(output, indent=2)

    if format_type == "text":
        lines = []
        for finding in findings:
            text = text_cache.get(str(Path(finding.file).resolve()), "")
            adapter = get_adapter(LANGUAGES[0])
            if adapter and text:
                line, col = adapter.byte_to_linecol(text, finding.start_byte)
                location = f"{line}:{col}"
            else:
                location = f"byte {finding.start_byte}"
            lines.append(f"{finding.file}:{location}: {finding.severity} {finding.rule} {finding.message}")
            for edit in finding.suggestions or []:
                lines.append(f"    suggestion: {edit.replacement}")
        lines.append(f"Scanned {files_count} files with {rules_count} rules, {len(findings)} findings")
        return "\n".join(lines)

    raise ValueError(f"Unknown format: {format_type}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chainlint",
        description="Suggest optional chaining in TypeScript and JavaScript sources",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  chainlint src/
  chainlint app.ts --format json --validate
  chainlint frontend/ --lang javascript --jobs 4
        """
    )

    parser.add_argument(
        "paths",
        nargs="*",
        help="Paths to files or directories to analyze"
    )

    parser.add_argument(
        "--lang", "--language",
        choices=["auto"] + LANGUAGES,
        default="auto",
        help="Language to analyze (default: auto, both TypeScript and JavaScript)"
    )

    parser.add_argument(
        "--config",
        help="Path to configuration file (default: nearest .chainlint.yml)"
    )

    parser.add_argument(
        "--rules",
        help="Rule patterns to run: '*' for all, or comma-separated IDs/patterns"
    )

    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)"
    )

    parser.add_argument(
        "--jobs",
        type=int,
        default=0,
        help="Number of parallel jobs (0=auto, 1=sequential, N=parallel)"
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate JSON output against schema"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--list-rules",
        action="store_true",
        help="List available rules and exit"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr
    )

    if args.list_rules:
        discover_rules()
        for rule in get_all_rules():
            print(f"{rule.meta.id}\t{','.join(rule.meta.langs)}\t{rule.meta.description}")
        return EXIT_CLEAN

    if not args.paths:
        parser.print_usage(sys.stderr)
        logger.error("No paths given")
        return EXIT_USAGE

    config_path = args.config or find_config_file(args.paths[0])
    config = load_config(config_path)
    logger.debug("Using config: %s", config_path or "defaults")

    rule_patterns = None
    if args.rules:
        rule_patterns = [pattern.strip() for pattern in args.rules.split(",") if pattern.strip()]

    jobs = args.jobs
    if jobs <= 0:
        jobs = min(4, os.cpu_count() or 1)

    findings, files_scanned, rules_run, metrics = analyze_paths(
        args.paths, args.lang, rule_patterns, config, jobs
    )
    logger.debug("Scanned %d files with %d rules", files_scanned, rules_run)

    if not files_scanned:
        logger.error("No files found to analyze")
        return EXIT_USAGE

    output = format_output(findings, files_scanned, rules_run, metrics, args.format)

    if args.validate and args.format == "json":
        errors = validate_runner_output(json.loads(output))
        if errors:
            for error in errors:
                logger.error("JSON validation error: %s", error)
            return EXIT_USAGE

    print(output)
    return EXIT_FINDINGS if findings else EXIT_CLEAN


if __name__ == "__main__":
    sys.exit(main())
