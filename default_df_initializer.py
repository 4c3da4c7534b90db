from csv_codec import ParsedCsv, parse_csv

# Sample annotations shipped with the editor, used when nothing is stored yet.
DEFAULT_CSV = """ID,Book,Chapter,Verse,TokenID,GreekText,IllocutionaryForce,Modality,Stance,Evidentiality,Face,Veridicality,EntailmentPattern,InferenceType,IsCancelled,Code,Prejacent,PresuppositionType,ImplicatureType,InvitedInference,IsScalar,ScaleType,Alternative,IsExhausted,PredicationType,Question-Under-Discussion,InferredProposition,Information_Structure,Notes,,,
,Philemon,1,1,"57001001-01, 57001001-02, 57001001-03, 57001001-04",ΠΑΥΛΟΣ ΔΕΣΜΙΟΣ ΧΡΙΣΤΟΥ ΙΗΣΟΥ,N/A,Realis,Identity,N/A,N/A,Veridical,N/A,Implicature,FALSE,DefiniteDescription,"Paul is in prison because of Jesus",N/A,Particularized Conversational,N/A,FALSE,N/A,N/A,N/A,"Appositive predication, Defining","Global implicit QUD: What should Philemon do about Onesimus?","Paul is like Onesimus because he also has a master.",,"Choice of description is marked. Paul is presequencing to prepare for a latter, potentially face-threatening act.",,,
,Philemon,1,12,"570010120010, 570010120020, 570010120030, 570010120040",ΟΝ ΗΓΑΠΗΜΕΝΕ,N/A,N/A,Attitudinal,N/A,N/A,N/A,N/A,N/A,FALSE,Interjection,N/A,N/A,N/A,N/A,FALSE,N/A,N/A,N/A,N/A,"Paul is using an affective address: he is feeling a lack of love from his church in Rome.",N/A,N/A,"Paul is presequencing, trying to mitigate the face threat inherent in asking Philemon to do something.",,,
,Philemon,1,17,"570010170010, 570010170020, 570010170030, 570010170040",ΕΙ ΟΥΝ ΜΕ ΕΧΕΙΣ ΚΟΙΝΩΝΟΝ,N/A,Hypothetical,N/A,N/A,N/A,Veridical,N/A,N/A,FALSE,Conjunction,N/A,N/A,N/A,N/A,FALSE,N/A,N/A,N/A,N/A,"QUD: Does Paul have the right to request this action?","Paul is appealing to Philemon's prior relationship/commitment to Paul to justify the request.",,"The conditional is of the 'If X then Y' type, where X is taken to be true.",,,
,Philemon,1,22,"570010220030010, 570010220040010, 570010220050010",ΕΤΟΙΜΑΖΕ ΜΟΙ ΞΕΝΙΑΝ,N/A,Directive,N/A,N/A,N/A,N/A,N/A,N/A,FALSE,Verb,N/A,N/A,N/A,N/A,FALSE,N/A,N/A,N/A,N/A,"QUD: Should Philemon prepare a guest room for Paul?","Paul is directing Philemon to prepare a guest room for him.",,"This is a command, and is a pre-sequence (Paul is anticipating his arrival).",,,
,Philemon,1,23,570010230010,ΕΠΑΦΡΑΣ,N/A,N/A,Identity,N/A,N/A,N/A,N/A,N/A,FALSE,Noun,N/A,N/A,N/A,N/A,FALSE,N/A,N/A,N/A,N/A,,N/A,,"This serves to introduce Epaphras to Philemon, and it serves an affiliative function.",,,
,Philemon,1,25,"570010250010, 570010250020, 570010250030, 570010250040, 570010250050",Η ΧΑΡΙΣ ΤΟΥ ΚΥΡΙΟΥ ΙΗΣΟΥ ΧΡΙΣΤΟΥ,N/A,Realis,Identity,N/A,N/A,Veridical,N/A,N/A,FALSE,Noun,N/A,N/A,N/A,N/A,FALSE,N/A,N/A,N/A,N/A,,N/A,,"Final closing formula. Paul is making a final wish for Philemon.",,,
"""


class DefaultDfInitializer:
    def __init__(self, text: str = DEFAULT_CSV):
        self.text = text

    def create(self) -> ParsedCsv:
        return parse_csv(self.text)
