import argparse

from scripts.stress_pomo import run_stress_pomo


def test_stress_pomo_fast_smoke(tmp_path) -> None:
    args = argparse.Namespace(
        steps=1500,
        seed=7,
        tick_rate=0.7,
        sound_fail_rate=0.2,
        workdir=str(tmp_path / ".stress_pomo"),
        clean=True,
    )
    rc = run_stress_pomo(args)
    assert rc == 0
    assert (tmp_path / ".stress_pomo" / "stress_pomo_report.json").exists()
