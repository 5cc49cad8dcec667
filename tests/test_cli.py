import pandas as pd
import pytest

from oligo_count.cli import main

FILE_A = ["ACGTTTTT", "TTTTTTTT", "GGACGTGG"] + ["CCCCCCCC"] * 7
FILE_B = ["TTTTTTTT"] * 5


@pytest.fixture
def run_dir(write_fastq, tmp_path):
    write_fastq("a.fastq", FILE_A)
    write_fastq("b.fq.gz", FILE_B)
    (tmp_path / "notes.txt").write_text("ignored")
    return tmp_path


def test_seq_mode_over_directory(run_dir, capsys):
    main(["--seq", "acgt", str(run_dir)])
    out = capsys.readouterr().out

    assert "Processing file: a.fastq" in out
    assert "Processing file: b.fq.gz" in out
    assert out.index("a.fastq") < out.index("b.fq.gz")
    assert "Total reads: 10, Mismatch allowance: 0.00" in out
    assert "Query, ACGT, 2, 20.00%" in out
    assert "Total reads: 5, Mismatch allowance: 0.00" in out
    assert "Query, ACGT, 0, 0.00%" in out


def test_csv_mode_with_mismatch_and_summary(run_dir, tmp_path, capsys):
    queries = tmp_path / "queries.csv"
    queries.write_text("name,sequence\nbc,ACGA\npoly_t,TTTT\n")
    summary = tmp_path / "summary.tsv"

    main(["--csv", str(queries), str(run_dir / "a.fastq"),
          "--mismatch", "0.25", "--summary", str(summary)])
    out = capsys.readouterr().out

    assert "Mismatch allowance: 0.25" in out
    assert out.index("bc, ACGA") < out.index("poly_t, TTTT")

    df = pd.read_csv(summary, sep="\t")
    assert list(df["name"]) == ["bc", "poly_t"]
    assert list(df["count"]) == [2, 2]


def test_yaml_mode_uses_mismatch_from_file(run_dir, tmp_path, capsys):
    queries = tmp_path / "queries.yaml"
    queries.write_text("queries:\n  bc: ACGA\nmismatch_fraction: 0.25\n")

    main(["--yaml", str(queries), str(run_dir / "a.fastq")])
    out = capsys.readouterr().out
    assert "bc, ACGA, 2, 20.00%" in out

    main(["--yaml", str(queries), str(run_dir / "a.fastq"), "--mismatch", "0"])
    out = capsys.readouterr().out
    assert "bc, ACGA, 0, 0.00%" in out


def test_show_reads(run_dir, capsys):
    main(["--seq", "ACGT", str(run_dir / "b.fq.gz"), "--show-reads"])
    out = capsys.readouterr().out
    assert out.count("Sequence: TTTTTTTT") == 5


def test_parallel_output_matches_sequential(run_dir, capsys):
    main(["--seq", "ACGT", str(run_dir)])
    sequential = capsys.readouterr().out
    main(["--seq", "ACGT", str(run_dir), "--workers", "2"])
    parallel = capsys.readouterr().out

    def strip_timing(text):
        return [line for line in text.splitlines() if not line.startswith("Time taken")]

    assert strip_timing(sequential) == strip_timing(parallel)


@pytest.mark.parametrize("mismatch", ["1.5", "-1", "lots"])
def test_invalid_mismatch_is_a_configuration_error(run_dir, mismatch):
    with pytest.raises(SystemExit) as excinfo:
        main(["--seq", "ACGT", str(run_dir), "--mismatch", mismatch])
    assert "mismatch" in str(excinfo.value).lower()


def test_duplicate_query_names_abort_before_processing(run_dir, tmp_path, capsys):
    queries = tmp_path / "queries.csv"
    queries.write_text("name,sequence\nbc,ACGT\nbc,TTTT\n")
    with pytest.raises(SystemExit) as excinfo:
        main(["--csv", str(queries), str(run_dir)])
    assert "Duplicate" in str(excinfo.value)
    assert "Processing file" not in capsys.readouterr().out


def test_missing_query_file(run_dir, tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["--csv", str(tmp_path / "nope.csv"), str(run_dir)])
    assert "not found" in str(excinfo.value)


def test_no_fastq_files(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["--seq", "ACGT", str(tmp_path)])
    assert "No FASTQ files" in str(excinfo.value)


def test_non_fastq_input_rejected(run_dir):
    with pytest.raises(SystemExit) as excinfo:
        main(["--seq", "ACGT", str(run_dir / "notes.txt")])
    assert "Not a FASTQ file" in str(excinfo.value)


def test_stream_error_aborts_by_default(run_dir, capsys):
    (run_dir / "0_bad.fastq").write_text("@r\nACGT\n+\n")
    with pytest.raises(SystemExit) as excinfo:
        main(["--seq", "ACGT", str(run_dir)])
    assert "0_bad.fastq" in str(excinfo.value)
    assert "Results for file" not in capsys.readouterr().out


def test_stream_error_skipped_on_request(run_dir, capsys):
    (run_dir / "0_bad.fastq").write_text("@r\nACGT\n+\n")
    main(["--seq", "ACGT", str(run_dir), "--on-error", "skip"])
    captured = capsys.readouterr()
    assert "0_bad.fastq" in captured.err
    assert "Results for file: a.fastq" in captured.out
    assert "Results for file: b.fq.gz" in captured.out


def test_plot_is_written(run_dir, tmp_path, capsys):
    plot = tmp_path / "counts.png"
    main(["--seq", "ACGT", str(run_dir), "--plot", str(plot)])
    assert plot.exists() and plot.stat().st_size > 0


def test_yaml_duplicate_query_names_abort_before_processing(run_dir, tmp_path, capsys):
    queries = tmp_path / "queries.yaml"
    queries.write_text("queries:\n  bc: ACGT\n  bc: TTTT\n")
    with pytest.raises(SystemExit) as excinfo:
        main(["--yaml", str(queries), str(run_dir)])
    assert "duplicate" in str(excinfo.value).lower()
    assert "Processing file" not in capsys.readouterr().out
