from __future__ import annotations
import os, datetime, time, json, logging
from survey_core.engine import SurveySession
from survey_core.report_html import export_report_html
from survey_core.export import to_xlsx
def ask(prompt: str, options) -> str:
    print(prompt)
    for i,opt in enumerate(options): print(f"  [{i}] {opt}")
    while True:
        v = input("Your choice (index): ").strip()
        if v.isdigit() and int(v) < len(options): return options[int(v)]
        print("Enter a listed index.")
def main():
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    print("구매 기준 가중치 평가")
    session = SurveySession()
    if not session.keywords:
        print("키워드가 없습니다. 관리자에게 문의하세요."); return
    while True:
        p = session.next_pair()
        if p is None: break
        if p.stage == "keyword_start":
            input(f'"{p.keyword}"에 대해 측정을 시작합니다. [Enter]'); session.begin_keyword(); continue
        head = f"({p.step+1}/{p.total}) " + (f"[{p.keyword}] " if p.keyword else "")
        t0 = time.perf_counter(); v = ask(head + "Which do you prefer?", list(p.pair)); rt = time.perf_counter() - t0
        session.answer_current(v, rt)
    res = session.finalize(); os.makedirs("reports", exist_ok=True)
    ts = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    payload = json.loads(json.dumps(res, default=lambda o: getattr(o, "__dict__", o)))
    path = os.path.join("reports", f"survey_{ts}.html")
    export_report_html(payload, path)
    if res.valid:
        with open(os.path.join("reports", f"survey_{ts}.xlsx"), "wb") as f: f.write(to_xlsx(res))
        for opt, score in res.ranking(): print(f"  {opt}: {score:.4f}")
    print(f"Done. Report saved to: {path}")
if __name__ == "__main__": main()
