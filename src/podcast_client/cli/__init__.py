import sys


def main(argv=None):
    """
    Console entrypoint for `podcast-client`.
    Usage:
        podcast-client [produce|monitor|--help|--version]
    """
    argv = sys.argv[1:] if argv is None else argv

    if not argv or argv[0] in {"-h", "--help", "help"}:
        print("Usage: podcast-client [produce|monitor|--help|--version]")
        print("Commands:")
        print("  produce    Submit a podcast for production and wait for the media URL")
        print("  monitor    Watch the production service health endpoint")
        print("  --version  Show version information")
        print("  --help     Show this help message")
        return 0

    if argv[0] in {"--version", "-v", "version"}:
        from podcast_client import __version__
        print(f"podcast-client {__version__}")
        return 0

    cmd, *rest = argv

    if cmd == "produce":
        from podcast_client.cli.produce import main as produce_main
        return produce_main(rest)

    if cmd == "monitor":
        from podcast_client.cli.monitor import main as monitor_main
        return monitor_main(rest)

    print(f"Unknown command: {cmd}")
    print("Use 'podcast-client --help' for available commands")
    return 1
