from report_issue.cli import main

raise SystemExit(main())
