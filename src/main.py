import sys
import os
import argparse
import json
import subprocess

import yaml

# Add src to path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from node_sim.provider import DevProvider
from rpc.errors import RpcError

def run_script(config_path, scenario_path, log_file):
    """Run every request of a YAML scenario against a fresh dev node."""
    with open(scenario_path, "r") as f:
        scenario = yaml.safe_load(f) or {}

    with DevProvider(config_path=config_path, output_file=log_file) as provider:
        for entry in scenario.get("requests", []):
            method = entry["method"]
            params = entry.get("params", [])
            try:
                record = {"method": method, "result": provider.request(method, params)}
            except RpcError as e:
                record = {"method": method, "error": e.to_dict()}
            print(json.dumps(record, sort_keys=True))

def list_methods(config_path, log_file):
    """Print the RPC methods the dev node answers, one per line."""
    with DevProvider(config_path=config_path, output_file=log_file) as provider:
        for method in provider.evm.supported_methods():
            print(method)

def run_tests():
    """Run all pytest tests."""
    result = subprocess.run(
        [sys.executable, "-m", "pytest", "tests/", "-v", "--tb=short"],
        cwd=os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
        capture_output=False
    )
    return result.returncode

def main():
    parser = argparse.ArgumentParser(
        description="EVM dev chain - time travel, mining and snapshot RPC",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --mode script --scenario config/example_scenario.yaml
  python main.py --mode script --scenario s.yaml --log events.log
  python main.py --mode methods
  python main.py --mode test
        """
    )

    parser.add_argument(
        "--mode",
        type=str,
        choices=["script", "methods", "test"],
        default="script",
        help="Execution mode (default: script)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/default_config.yaml",
        help="Path to chain config file"
    )
    parser.add_argument(
        "--scenario",
        type=str,
        default="config/example_scenario.yaml",
        help="YAML file with the list of requests to run"
    )
    parser.add_argument(
        "--log",
        type=str,
        default=None,
        help="Event log file path (default: stderr)"
    )

    args = parser.parse_args()

    if args.mode == "test":
        print("Running all tests...\n")
        sys.exit(run_tests())

    log_file = sys.stderr
    if args.log:
        try:
            log_file = open(args.log, "w")
        except IOError as e:
            print(f"Error opening log file: {e}")
            sys.exit(1)

    if args.mode == "methods":
        try:
            list_methods(args.config, log_file)
        finally:
            if log_file is not sys.stderr:
                log_file.close()
        return

    try:
        run_script(args.config, args.scenario, log_file)
    except FileNotFoundError as e:
        print(f"Scenario file not found: {e.filename}")
        sys.exit(1)
    finally:
        if log_file is not sys.stderr:
            log_file.close()

if __name__ == "__main__":
    main()
