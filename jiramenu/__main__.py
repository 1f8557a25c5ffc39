from jiramenu.cli import main

main()
