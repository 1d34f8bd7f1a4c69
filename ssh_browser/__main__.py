from ssh_browser.cli import main

raise SystemExit(main())
