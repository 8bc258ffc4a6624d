from toycalc.main import main

main()
