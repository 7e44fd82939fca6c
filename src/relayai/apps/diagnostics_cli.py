from __future__ import annotations

from relayai.cli import base_parser, setup_logging
from relayai.core.config.loader import load_client_config
from relayai.core.providers.dispatcher import AIDispatcher
from relayai.core.providers.health import render_status
from relayai.core.providers.registry import canonical_provider
from relayai.core.runtime.cancellation import CancelToken
from relayai.core.runtime.errors import RelayAIError


def main() -> int:
    parser = base_parser("relayai-diag", "RelayAI diagnostics CLI")
    parser.add_argument("--validate-config", action="store_true")
    parser.add_argument("--status", action="store_true")
    parser.add_argument("--test-connection", action="store_true")
    parser.add_argument("--prompt", default=None, help="Send one prompt and print the response")
    parser.add_argument("--timeout", type=float, default=None, help="Deadline in seconds for --prompt")
    args = parser.parse_args()

    if not any([args.validate_config, args.status, args.test_connection, args.prompt]):
        parser.print_help()
        return 1

    try:
        cfg = load_client_config(instance_path=args.config)
        provider = canonical_provider(cfg.provider)
    except (ValueError, RelayAIError) as exc:
        print(f"config-invalid error={exc}")
        return 1

    if args.validate_config:
        print(
            f"config-valid provider={provider} model={cfg.model} "
            f"simulation_policy={cfg.simulation_policy.value} max_retry_attempts={cfg.max_retry_attempts}"
        )

    if not (args.status or args.test_connection or args.prompt):
        return 0

    setup_logging(args, cfg)
    rc = 0
    with AIDispatcher(cfg) as dispatcher:
        if args.status:
            print("status:")
            print(render_status(dispatcher.get_status()))

        if args.test_connection:
            ok = dispatcher.test_connection()
            print(f"connection-ok={ok}")
            if not ok:
                rc = 1

        if args.prompt:
            cancel = CancelToken(timeout_seconds=args.timeout) if args.timeout else None
            try:
                print(dispatcher.send_request(args.prompt, cancel=cancel))
            except RelayAIError as exc:
                print(f"request-failed error={exc}")
                rc = 1

    return rc


if __name__ == "__main__":
    raise SystemExit(main())
