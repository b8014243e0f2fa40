import argparse, json, sys
from dataclasses import asdict
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from exambank.core.config import get_settings
from exambank.services.question_bank import get_question_bank
from exambank.services.selection import syllabus_coverage
from exambank.services.syllabus import load_syllabus

def main(argv=None):
    ap = argparse.ArgumentParser(description="Show how well a stored exam covers the syllabus quotas.")
    ap.add_argument("--exam", "--exam_name", dest="exam_name", required=True)
    ap.add_argument("--dsn", default=None, help="database URL (default: DATABASE_URL)")
    ap.add_argument("--syllabus", default=None, help="JSON syllabus file (default: SYLLABUS_FILE or built-in table)")
    ap.add_argument("--json", action="store_true", help="print JSON rows instead of a table")
    args = ap.parse_args(argv)
    settings = get_settings()
    syllabus = load_syllabus(args.syllabus or settings.SYLLABUS_FILE)
    engine = create_engine(args.dsn or settings.DATABASE_URL, future=True)
    try:
        with sessionmaker(bind=engine, future=True)() as db:
            bank = get_question_bank(db, args.exam_name)
    finally:
        engine.dispose()
    if bank is None:
        print(f'Exam "{args.exam_name}" not found', file=sys.stderr); return 1
    rows = syllabus_coverage(bank, syllabus)
    if args.json:
        print(json.dumps([asdict(r) for r in rows], indent=2)); return 0
    width = max([len(r.area_name) for r in rows] + [len("Practice area")])
    print(f"{'Practice area':<{width}}  required  available  status")
    for r in rows:
        print(f"{r.area_name:<{width}}  {r.required_questions:>8}  {r.total_available_questions:>9}  {r.status}")
    short = sum(1 for r in rows if r.status == "Insufficient")
    print(f"areas={len(rows)} in_syllabus={sum(r.in_syllabus for r in rows)} insufficient={short}")
    return 0

if __name__ == "__main__": sys.exit(main())
