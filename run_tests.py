#!/usr/bin/env python3
"""
테스트 실행 스크립트

Usage:
    python run_tests.py               # 모든 테스트 실행
    python run_tests.py --unit        # 단위 테스트만 실행
    python run_tests.py --integration # WebSocket 통합 테스트만 실행
    python run_tests.py --quick       # 실패 시 즉시 중단
    python run_tests.py --install     # 테스트 의존성 설치 후 실행
"""

import sys
import subprocess
import argparse
from pathlib import Path

PYTEST = [sys.executable, "-m", "pytest"]


def run_command(cmd, description=""):
    """명령어 실행"""
    print(f"\n{'='*60}")
    print(f"🚀 {description}")
    print(f"{'='*60}")
    print(f"실행 명령어: {' '.join(cmd)}")
    print()

    try:
        subprocess.run(cmd, check=True, capture_output=False)
        print(f"\n✅ {description} 성공!")
        return True
    except subprocess.CalledProcessError as e:
        print(f"\n❌ {description} 실패! (exit code: {e.returncode})")
        return False


def install_dependencies():
    """패키지와 테스트 의존성 설치"""
    return run_command(
        [sys.executable, "-m", "pip", "install", "-e", ".[test]"],
        "테스트 의존성 설치"
    )


def main():
    parser = argparse.ArgumentParser(description="테스트 실행 스크립트")
    parser.add_argument("--unit", action="store_true", help="단위 테스트만 실행")
    parser.add_argument("--integration", action="store_true", help="통합 테스트만 실행")
    parser.add_argument("--quick", action="store_true", help="빠른 테스트 (실패 시 중단)")
    parser.add_argument("--install", action="store_true", help="의존성 설치")

    args = parser.parse_args()

    project_root = Path(__file__).parent
    print(f"📁 프로젝트 디렉토리: {project_root.absolute()}")

    success = True

    if args.install:
        success &= install_dependencies()

    if args.unit:
        success &= run_command(PYTEST + ["tests/unit/", "-v", "--tb=short"], "단위 테스트 실행")
    elif args.integration:
        success &= run_command(PYTEST + ["tests/integration/", "-v", "--tb=short"], "통합 테스트 실행")
    elif args.quick:
        success &= run_command(PYTEST + ["tests/", "--tb=short", "-x"], "빠른 테스트 실행 (실패 시 중단)")
    else:
        success &= run_command(PYTEST + ["tests/", "-v", "--tb=short"], "전체 테스트 실행")

    print(f"\n{'='*60}")
    if success:
        print("🎉 모든 작업이 성공적으로 완료되었습니다!")
    else:
        print("💥 일부 작업이 실패했습니다.")
        print("❌ 로그를 확인하여 문제를 해결해주세요.")
    print(f"{'='*60}")

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
